"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from pathlib import Path

from update_lens.core.entities import ReleaseRecord, SnapshotLoadResult


class SnapshotLoader(ABC):
    """Interface for loading the release record collection."""

    @abstractmethod
    async def load(self) -> SnapshotLoadResult:
        """Load and coerce the current snapshot of records."""
        pass


class ReleaseExporter(ABC):
    """Interface for rendering a customer's release update."""

    @abstractmethod
    def render(self, records: list[ReleaseRecord], customer_name: str) -> str:
        """Render records as a document."""
        pass

    @abstractmethod
    def save(self, content: str, output_path: Path) -> None:
        """Write a rendered document."""
        pass

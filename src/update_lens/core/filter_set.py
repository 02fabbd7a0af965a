"""Filter set entity and its persistence shape."""

import math
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Optional


class SortOrder(str, Enum):
    """Ordering of the visible items by release date."""

    NEWEST = "newest"
    OLDEST = "oldest"


class EmptySelectionPolicy(str, Enum):
    """Meaning of an empty multi-value selection during normalization.

    ``UNRESTRICTED`` keeps the selection empty, so the dimension does not
    restrict anything. ``RESTRICTIVE`` turns it into the full list of values
    available right now, so values that appear later stay excluded.
    """

    UNRESTRICTED = "unrestricted"
    RESTRICTIVE = "restrictive"


TARGETING_FIELDS = ("target_customer_ids", "target_group_ids", "target_owners")

# Multi-value dimensions repaired by the selection normalizer, in the order
# they are normalized after sources and products.
SELECTION_FIELDS = (
    "statuses",
    "categories",
    "tags",
    "waves",
    "months",
    "availability_types",
    "enabled_for",
    "geography",
    "language",
)

LIST_FIELDS = TARGETING_FIELDS + ("products", "sources") + SELECTION_FIELDS
INT_FIELDS = (
    "period_new_days",
    "period_changed_days",
    "release_in_days",
    "horizon_months",
    "history_months",
)
STR_FIELDS = ("release_date_from", "release_date_to", "query")


def _is_number(value: Any) -> bool:
    """Finite int or float; bools and infinities do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True)
class FilterSet:
    """Complete bundle of filter values plus audience-targeting fields."""

    target_customer_ids: list[str] = field(default_factory=list)
    target_group_ids: list[str] = field(default_factory=list)
    target_owners: list[str] = field(default_factory=list)
    products: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    statuses: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    waves: list[str] = field(default_factory=list)
    months: list[str] = field(default_factory=list)
    availability_types: list[str] = field(default_factory=list)
    enabled_for: list[str] = field(default_factory=list)
    geography: list[str] = field(default_factory=list)
    language: list[str] = field(default_factory=list)
    period_new_days: int = 0
    period_changed_days: int = 0
    release_in_days: int = 0
    min_version: Optional[int] = None
    release_date_from: str = ""
    release_date_to: str = ""
    sort_order: SortOrder = SortOrder.NEWEST
    query: str = ""
    horizon_months: int = 12
    history_months: int = 12

    def updated(self, **changes: Any) -> "FilterSet":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping suitable for YAML/JSON persistence."""
        data = asdict(self)
        data["sort_order"] = self.sort_order.value
        return data

    @classmethod
    def from_dict(
        cls, data: Any, defaults: Optional["FilterSet"] = None
    ) -> "FilterSet":
        """Merge a stored payload over ``defaults``.

        Raises:
            ValueError: If the payload is not a mapping or a field has the
                wrong shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Filter payload must be a mapping, got {type(data).__name__}")

        base = (defaults or cls()).to_dict()
        known = {f.name for f in fields(cls)}
        merged = {**base, **{k: v for k, v in data.items() if k in known}}

        for name in LIST_FIELDS:
            value = merged[name]
            if value is None:
                merged[name] = []
            elif not isinstance(value, (list, tuple)):
                raise ValueError(f"Field {name!r} must be a list")
            else:
                merged[name] = [str(v) for v in value]

        for name in INT_FIELDS:
            value = merged[name]
            if not _is_number(value):
                raise ValueError(f"Field {name!r} must be a number")
            merged[name] = int(value)

        for name in STR_FIELDS:
            value = merged[name]
            merged[name] = "" if value is None else str(value)

        min_version = merged["min_version"]
        if min_version is not None:
            if not _is_number(min_version):
                raise ValueError("Field 'min_version' must be a number or null")
            merged["min_version"] = int(min_version)

        try:
            merged["sort_order"] = SortOrder(merged["sort_order"])
        except ValueError:
            raise ValueError(f"Unknown sort order: {merged['sort_order']!r}") from None

        return cls(**merged)

"""Core domain entities."""

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Optional


class ReleaseSource(str, Enum):
    """Origin of a release record."""

    MICROSOFT = "Microsoft"
    EOS = "EOS"


RELEASE_SOURCE_LABELS = {
    ReleaseSource.MICROSOFT: "Microsoft Release Plans",
    ReleaseSource.EOS: "EOS Apps",
}

ALL_RELEASE_SOURCES = [ReleaseSource.MICROSOFT, ReleaseSource.EOS]


class ReleaseStatus(str, Enum):
    """Lifecycle status of a release record."""

    PLANNED = "Planned"
    ROLLING_OUT = "Rolling out"
    TRY_NOW = "Try now"
    LAUNCHED = "Launched"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ReleaseRecord:
    """Fields shared by every release record, whatever its source."""

    source: ClassVar[ReleaseSource]

    id: str
    product_name: str
    title: str
    status: ReleaseStatus
    availability_date: str
    release_date: str
    product: str = ""
    product_id: str = ""
    summary: str = ""
    description: str = ""
    last_updated_date: Optional[str] = None
    category: Optional[str] = None
    tags: tuple[str, ...] = ()
    geography: Optional[str] = None
    geography_countries: tuple[str, ...] = ()
    language: Optional[str] = None
    try_now: bool = False
    source_url: Optional[str] = None
    learn_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Id cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")


@dataclass(frozen=True)
class ReleasePlanRecord(ReleaseRecord):
    """Entry of the vendor release-plan catalog."""

    source: ClassVar[ReleaseSource] = ReleaseSource.MICROSOFT

    wave: Optional[str] = None
    availability_types: tuple[str, ...] = ()
    enabled_for: Optional[str] = None
    source_plan_id: Optional[str] = None


@dataclass(frozen=True)
class PartnerAppRecord(ReleaseRecord):
    """Entry of the partner "what's new" changelog."""

    source: ClassVar[ReleaseSource] = ReleaseSource.EOS

    min_bc_version: Optional[int] = None


RECORD_TYPES: dict[ReleaseSource, type[ReleaseRecord]] = {
    ReleaseSource.MICROSOFT: ReleasePlanRecord,
    ReleaseSource.EOS: PartnerAppRecord,
}

_SEQUENCE_FIELDS = ("tags", "geography_countries", "availability_types")


def _as_tuple(value: Any, key: str) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Field {key!r} must be a list")
    return tuple(str(v) for v in value)


def _as_version(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"Field 'min_bc_version' must be a number, got {value!r}")
    return int(value)


def record_from_dict(data: dict[str, Any]) -> ReleaseRecord:
    """Build the record variant matching the ``source`` key of a mapping."""
    try:
        source = ReleaseSource(data.get("source"))
    except ValueError:
        raise ValueError(f"Unknown source: {data.get('source')!r}") from None

    record_type = RECORD_TYPES[source]
    allowed = {f.name for f in fields(record_type)}
    kwargs = {key: value for key, value in data.items() if key in allowed}

    for key in _SEQUENCE_FIELDS:
        if key in kwargs:
            kwargs[key] = _as_tuple(kwargs[key], key)

    if kwargs.get("min_bc_version") is not None:
        kwargs["min_bc_version"] = _as_version(kwargs["min_bc_version"])

    try:
        kwargs["status"] = ReleaseStatus(kwargs.get("status", "Unknown"))
    except ValueError:
        kwargs["status"] = ReleaseStatus.UNKNOWN

    try:
        return record_type(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed record {data.get('id')!r}: {e}") from e


class FilterMode(str, Enum):
    """How a customer's filters relate to the global ones."""

    INHERIT = "inherit"
    CUSTOM = "custom"


@dataclass
class Customer:
    """Customer that receives release updates."""

    id: str
    name: str
    owner: str = ""
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Customer id cannot be empty")


@dataclass
class CustomerGroup:
    """Named set of customers used for audience targeting."""

    id: str
    name: str
    customer_ids: list[str] = field(default_factory=list)
    description: str = ""


@dataclass
class SnapshotLoadResult:
    """Records coerced from a snapshot plus the entries that were rejected."""

    items: list[ReleaseRecord]
    errors: list[str] = field(default_factory=list)

"""Per-dimension option lists built from the loaded records."""

from dataclasses import dataclass, field, fields
from typing import Callable, Iterable

from update_lens.core.entities import ReleaseRecord, ReleaseSource
from update_lens.core.geography import extract_countries_from_html
from update_lens.core.labels import normalize_product_label


@dataclass
class FilterOption:
    """Distinct value of a dimension with its occurrence count."""

    value: str
    count: int
    sources: list[ReleaseSource] = field(default_factory=list)


@dataclass
class FilterMetadata:
    """Options available for every multi-value dimension."""

    sources: list[FilterOption] = field(default_factory=list)
    products: list[FilterOption] = field(default_factory=list)
    statuses: list[FilterOption] = field(default_factory=list)
    categories: list[FilterOption] = field(default_factory=list)
    tags: list[FilterOption] = field(default_factory=list)
    waves: list[FilterOption] = field(default_factory=list)
    months: list[FilterOption] = field(default_factory=list)
    availability_types: list[FilterOption] = field(default_factory=list)
    enabled_for: list[FilterOption] = field(default_factory=list)
    geography: list[FilterOption] = field(default_factory=list)
    language: list[FilterOption] = field(default_factory=list)

    def options_for(self, dimension: str) -> list[FilterOption]:
        if dimension not in {f.name for f in fields(self)}:
            raise KeyError(dimension)
        return getattr(self, dimension)

    @property
    def is_empty(self) -> bool:
        return not self.sources and not self.products


def record_countries(record: ReleaseRecord) -> list[str]:
    """Countries of a record, extracted from its geography HTML if needed."""
    if record.geography_countries:
        return list(record.geography_countries)
    return extract_countries_from_html(record.geography or "")


def _count_values(
    records: Iterable[ReleaseRecord],
    extract: Callable[[ReleaseRecord], Iterable[str | None]],
    descending: bool = False,
) -> list[FilterOption]:
    counts: dict[str, FilterOption] = {}

    for record in records:
        for value in extract(record):
            if not value:
                continue
            option = counts.setdefault(value, FilterOption(value=value, count=0))
            option.count += 1
            if record.source not in option.sources:
                option.sources.append(record.source)

    return sorted(counts.values(), key=lambda option: option.value, reverse=descending)


def build_filter_metadata(records: list[ReleaseRecord]) -> FilterMetadata:
    """
    Collect distinct values, counts and owning sources for every dimension.

    Multi-valued fields contribute once per value. Product labels are
    canonicalized first so cosmetic variants merge into one option. Months
    are sorted most recent first, everything else alphabetically.
    """
    return FilterMetadata(
        sources=_count_values(records, lambda r: [r.source.value]),
        products=_count_values(records, lambda r: [normalize_product_label(r.product_name)]),
        statuses=_count_values(records, lambda r: [r.status.value]),
        categories=_count_values(records, lambda r: [r.category]),
        tags=_count_values(records, lambda r: r.tags),
        waves=_count_values(records, lambda r: [getattr(r, "wave", None)]),
        months=_count_values(records, lambda r: [r.availability_date], descending=True),
        availability_types=_count_values(records, lambda r: getattr(r, "availability_types", ())),
        enabled_for=_count_values(records, lambda r: [getattr(r, "enabled_for", None)]),
        geography=_count_values(records, record_countries),
        language=_count_values(records, lambda r: [r.language]),
    )

"""Which filter dimensions apply to which release source."""

from enum import Enum
from typing import Iterable, Optional

from update_lens.core.entities import ALL_RELEASE_SOURCES, ReleaseSource


class FilterKey(str, Enum):
    """Filter dimension as exposed to capability checks."""

    STATUS = "status"
    WAVE = "wave"
    CATEGORIES = "categories"
    GEOGRAPHY = "geography"
    ENABLED_FOR = "enabledFor"
    AVAILABILITY_TYPE = "availabilityType"
    RELEASE_DATE_RANGE = "releaseDateRange"
    PERIOD_NEW_DAYS = "periodNewDays"
    PERIOD_CHANGED_DAYS = "periodChangedDays"
    RELEASE_IN_DAYS = "releaseInDays"
    BC_MIN_VERSION = "bcMinVersion"
    PRODUCT_OR_APP = "productOrApp"
    MONTHS = "months"
    TAGS = "tags"
    LANGUAGE = "language"
    QUERY = "query"
    SORT_ORDER = "sortOrder"
    HISTORY_MONTHS = "historyMonths"
    HORIZON_MONTHS = "horizonMonths"


_SHARED = frozenset({
    FilterKey.STATUS,
    FilterKey.CATEGORIES,
    FilterKey.GEOGRAPHY,
    FilterKey.RELEASE_DATE_RANGE,
    FilterKey.PERIOD_NEW_DAYS,
    FilterKey.PERIOD_CHANGED_DAYS,
    FilterKey.RELEASE_IN_DAYS,
    FilterKey.PRODUCT_OR_APP,
    FilterKey.MONTHS,
    FilterKey.TAGS,
    FilterKey.LANGUAGE,
    FilterKey.QUERY,
    FilterKey.SORT_ORDER,
    FilterKey.HISTORY_MONTHS,
    FilterKey.HORIZON_MONTHS,
})

FILTER_CAPABILITIES: dict[ReleaseSource, frozenset[FilterKey]] = {
    ReleaseSource.MICROSOFT: _SHARED | {
        FilterKey.WAVE,
        FilterKey.ENABLED_FOR,
        FilterKey.AVAILABILITY_TYPE,
    },
    ReleaseSource.EOS: _SHARED | {FilterKey.BC_MIN_VERSION},
}

# FilterSet field -> dimension it is gated by.
FIELD_FILTER_KEYS: dict[str, FilterKey] = {
    "products": FilterKey.PRODUCT_OR_APP,
    "statuses": FilterKey.STATUS,
    "categories": FilterKey.CATEGORIES,
    "tags": FilterKey.TAGS,
    "waves": FilterKey.WAVE,
    "months": FilterKey.MONTHS,
    "availability_types": FilterKey.AVAILABILITY_TYPE,
    "enabled_for": FilterKey.ENABLED_FOR,
    "geography": FilterKey.GEOGRAPHY,
    "language": FilterKey.LANGUAGE,
}


def is_filter_supported(source: ReleaseSource | str, key: FilterKey) -> bool:
    return key in FILTER_CAPABILITIES[ReleaseSource(source)]


def supported_sources_for_filter(key: FilterKey) -> list[ReleaseSource]:
    return [source for source in ALL_RELEASE_SOURCES if key in FILTER_CAPABILITIES[source]]


def resolve_active_sources(
    sources: Optional[Iterable[ReleaseSource | str]] = None,
) -> list[ReleaseSource]:
    """Turn a source selection into concrete sources; empty means all of them."""
    resolved = [ReleaseSource(source) for source in sources or ()]
    return resolved or list(ALL_RELEASE_SOURCES)


def active_supported_sources(
    active_sources: Iterable[ReleaseSource | str], key: FilterKey
) -> list[ReleaseSource]:
    active = set(resolve_active_sources(active_sources))
    return [source for source in supported_sources_for_filter(key) if source in active]


def is_filter_visible(active_sources: Iterable[ReleaseSource | str], key: FilterKey) -> bool:
    """Whether a control for ``key`` makes sense for the active sources."""
    return bool(active_supported_sources(active_sources, key))

"""Core domain layer."""

from update_lens.core.capabilities import FilterKey, is_filter_supported, resolve_active_sources
from update_lens.core.customers import CustomerDirectory
from update_lens.core.entities import (
    Customer,
    CustomerGroup,
    FilterMode,
    PartnerAppRecord,
    ReleasePlanRecord,
    ReleaseRecord,
    ReleaseSource,
    ReleaseStatus,
    SnapshotLoadResult,
    record_from_dict,
)
from update_lens.core.filter_set import EmptySelectionPolicy, FilterSet, SortOrder
from update_lens.core.filter_store import FilterStore, FilterStoreState
from update_lens.core.interfaces import ReleaseExporter, SnapshotLoader
from update_lens.core.labels import normalize_product_label
from update_lens.core.metadata import FilterMetadata, FilterOption, build_filter_metadata
from update_lens.core.normalization import (
    NormalizationContext,
    build_normalization_context,
    create_default_filters,
    normalize_filters,
    normalize_selection,
)
from update_lens.core.predicates import (
    filter_release_items,
    restriction_report,
    sort_release_items,
)
from update_lens.core.resolver import (
    resolve_audience,
    select_effective_filters,
    strip_targeting_fields,
)

__all__ = [
    "ReleaseRecord",
    "ReleasePlanRecord",
    "PartnerAppRecord",
    "ReleaseSource",
    "ReleaseStatus",
    "SnapshotLoadResult",
    "record_from_dict",
    "Customer",
    "CustomerGroup",
    "CustomerDirectory",
    "FilterMode",
    "FilterKey",
    "FilterSet",
    "SortOrder",
    "EmptySelectionPolicy",
    "FilterStore",
    "FilterStoreState",
    "FilterMetadata",
    "FilterOption",
    "NormalizationContext",
    "SnapshotLoader",
    "ReleaseExporter",
    "is_filter_supported",
    "resolve_active_sources",
    "normalize_product_label",
    "build_filter_metadata",
    "build_normalization_context",
    "create_default_filters",
    "normalize_filters",
    "normalize_selection",
    "select_effective_filters",
    "strip_targeting_fields",
    "resolve_audience",
    "filter_release_items",
    "restriction_report",
    "sort_release_items",
]

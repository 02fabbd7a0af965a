"""Repair of stored filter selections against freshly loaded metadata."""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from update_lens.core.capabilities import resolve_active_sources
from update_lens.core.entities import ReleaseRecord, ReleaseSource
from update_lens.core.filter_set import (
    SELECTION_FIELDS,
    EmptySelectionPolicy,
    FilterSet,
    SortOrder,
)
from update_lens.core.labels import normalize_product_label
from update_lens.core.metadata import FilterMetadata, FilterOption


@dataclass
class NormalizationContext:
    """Everything the normalizer needs to know about the current data."""

    source_options: list[str]
    metadata: FilterMetadata
    product_sources: dict[str, set[ReleaseSource]] = field(default_factory=dict)
    products_by_source: dict[ReleaseSource, list[str]] = field(default_factory=dict)

    @property
    def is_ready(self) -> bool:
        return bool(self.source_options) and bool(self.metadata.products)


def build_normalization_context(
    records: Iterable[ReleaseRecord],
    metadata: FilterMetadata,
    source_options: Optional[list[str]] = None,
) -> NormalizationContext:
    """Index canonical product labels by source and vice versa."""
    product_sources: dict[str, set[ReleaseSource]] = {}
    products_by_source: dict[ReleaseSource, list[str]] = {}

    for record in records:
        label = normalize_product_label(record.product_name)
        if not label:
            continue
        product_sources.setdefault(label, set()).add(record.source)
        products = products_by_source.setdefault(record.source, [])
        if label not in products:
            products.append(label)

    if source_options is None:
        source_options = [option.value for option in metadata.sources]

    return NormalizationContext(
        source_options=source_options,
        metadata=metadata,
        product_sources=product_sources,
        products_by_source=products_by_source,
    )


def available_values(
    options: Sequence[FilterOption | str],
    active_sources: Iterable[ReleaseSource | str],
    match_all_sources: bool = False,
) -> list[str]:
    """
    Values of ``options`` usable with the active sources.

    Plain string options carry no source information and are all kept.
    Sourced options need at least one active source, or every active source
    when ``match_all_sources`` is set.
    """
    active = [ReleaseSource(source) for source in active_sources]
    values = []

    for option in options:
        if isinstance(option, str):
            values.append(option)
            continue
        if not active:
            continue
        if match_all_sources:
            matches = all(source in option.sources for source in active)
        else:
            matches = any(source in option.sources for source in active)
        if matches:
            values.append(option.value)

    return values


def normalize_selection(
    values: Sequence[str],
    available: Sequence[str],
    empty_policy: EmptySelectionPolicy = EmptySelectionPolicy.UNRESTRICTED,
) -> list[str]:
    """
    Drop values that are no longer available.

    When every selected value went stale the whole available list is
    returned instead, so a dimension never silently hides everything.
    """
    if not values:
        if empty_policy is EmptySelectionPolicy.RESTRICTIVE:
            return list(available)
        return []

    allowed = set(available)
    valid = list(dict.fromkeys(value for value in values if value in allowed))
    return valid if valid else list(available)


def _canonical_products(values: Iterable[str]) -> list[str]:
    labels = (normalize_product_label(value) for value in values)
    return list(dict.fromkeys(label for label in labels if label))


def _ensure_product_coverage(
    products: list[str],
    active_sources: list[ReleaseSource],
    context: NormalizationContext,
) -> list[str]:
    expanded = list(products)
    for source in active_sources:
        covered = any(
            source in context.product_sources.get(product, ()) for product in products
        )
        if covered:
            continue
        for product in context.products_by_source.get(source, []):
            if product not in expanded:
                expanded.append(product)
    return expanded


def normalize_filters(
    raw: Optional[FilterSet],
    defaults: FilterSet,
    context: NormalizationContext,
    empty_policy: EmptySelectionPolicy = EmptySelectionPolicy.UNRESTRICTED,
    match_all_sources: bool = False,
) -> FilterSet:
    """
    Repair a stored filter set so every selection is valid for current data.

    Sources are normalized first because every other dimension's available
    values depend on them. Products are canonicalized, validated, and then
    expanded so each active source keeps at least one product. The call is
    idempotent for a fixed context.

    Args:
        raw: Stored filters, or None when nothing was stored yet
        defaults: Filter set used when ``raw`` is None
        context: Current metadata and product indexes
        empty_policy: What an empty selection means for this call path
        match_all_sources: Require an option to exist in every active source

    Returns:
        Normalized filter set; ``raw`` unchanged while data is still loading
    """
    if raw is None:
        return defaults

    if not context.is_ready:
        return raw

    sources = normalize_selection(raw.sources, context.source_options, empty_policy)
    active_sources = resolve_active_sources(sources)
    metadata = context.metadata

    products = normalize_selection(
        _canonical_products(raw.products),
        available_values(metadata.products, active_sources, match_all_sources),
        empty_policy,
    )
    products = _ensure_product_coverage(products, active_sources, context)

    changes = {
        name: normalize_selection(
            getattr(raw, name),
            available_values(metadata.options_for(name), active_sources, match_all_sources),
            empty_policy,
        )
        for name in SELECTION_FIELDS
    }

    return raw.updated(sources=sources, products=products, **changes)


def create_default_filters(
    product_options: list[str],
    source_options: list[str],
    status_options: list[str],
    horizon_months: int,
    history_months: int,
) -> FilterSet:
    """Filter set used on first run and whenever stored filters are unusable."""
    return FilterSet(
        products=list(product_options),
        sources=list(source_options),
        statuses=list(status_options),
        sort_order=SortOrder.NEWEST,
        horizon_months=horizon_months,
        history_months=history_months,
    )

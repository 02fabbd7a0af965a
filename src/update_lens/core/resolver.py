"""Effective filters for the active customer, and audience scoping."""

from typing import Iterable, Mapping, Optional

from update_lens.core.entities import Customer, CustomerGroup, FilterMode
from update_lens.core.filter_set import TARGETING_FIELDS, EmptySelectionPolicy, FilterSet
from update_lens.core.normalization import NormalizationContext, normalize_filters


def select_effective_filters(
    active_customer_id: Optional[str],
    global_filters: Optional[FilterSet],
    customer_filters: Mapping[str, FilterSet],
    customer_modes: Mapping[str, FilterMode],
    defaults: FilterSet,
    context: NormalizationContext,
    empty_policy: EmptySelectionPolicy = EmptySelectionPolicy.UNRESTRICTED,
) -> FilterSet:
    """
    Single source of truth for the filters governing a view.

    - No active customer: normalized global filters
    - Customer in ``inherit`` mode: normalized global filters
    - Customer in ``custom`` mode without a stored override: global again
    - Customer in ``custom`` mode with an override: the normalized override
    """
    normalized_global = normalize_filters(global_filters, defaults, context, empty_policy)

    if not active_customer_id:
        return normalized_global

    mode = customer_modes.get(active_customer_id, FilterMode.INHERIT)
    if mode is FilterMode.INHERIT:
        return normalized_global

    override = customer_filters.get(active_customer_id)
    if override is None:
        return normalized_global

    return normalize_filters(override, defaults, context, empty_policy)


def strip_targeting_fields(filters: FilterSet) -> FilterSet:
    """Drop audience fields; they never decide item visibility."""
    return filters.updated(**{name: [] for name in TARGETING_FIELDS})


def resolve_audience(
    filters: FilterSet,
    customers: Iterable[Customer],
    groups: Iterable[CustomerGroup] = (),
) -> list[str]:
    """
    Ids of the active customers targeted by a filter set.

    Explicit customer ids and group members are united; owner tags select
    customers by owner. When both kinds of targeting are set only customers
    matching both are kept. Without any targeting every active customer is
    included.
    """
    active = [customer for customer in customers if customer.is_active]

    targeted = set(filters.target_customer_ids)
    members = {group.id: group.customer_ids for group in groups}
    for group_id in filters.target_group_ids:
        targeted.update(members.get(group_id, []))

    owners = set(filters.target_owners)
    by_owner = {customer.id for customer in active if owners and customer.owner in owners}

    if owners and targeted:
        included = by_owner & targeted
    elif owners:
        included = by_owner
    elif targeted:
        included = targeted
    else:
        included = {customer.id for customer in active}

    return [customer.id for customer in active if customer.id in included]

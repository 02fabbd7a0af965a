"""Tests for effective filter resolution and audience scoping."""

import pytest

from update_lens.core import (
    Customer,
    CustomerGroup,
    FilterMode,
    FilterSet,
    build_filter_metadata,
    build_normalization_context,
    resolve_audience,
    select_effective_filters,
    strip_targeting_fields,
)


@pytest.fixture
def context(records):
    return build_normalization_context(records, build_filter_metadata(records))


def test_inherit_propagation(context) -> None:
    """Global [Microsoft] reaches an inheriting and an override-less custom customer."""
    global_filters = FilterSet(sources=["Microsoft"])
    defaults = FilterSet()
    modes = {"x": FilterMode.INHERIT}
    overrides: dict = {}

    inherited = select_effective_filters("x", global_filters, overrides, modes, defaults, context)
    assert inherited.sources == ["Microsoft"]

    modes["x"] = FilterMode.CUSTOM
    custom_without_override = select_effective_filters(
        "x", global_filters, overrides, modes, defaults, context
    )
    assert custom_without_override.sources == ["Microsoft"]

    overrides["x"] = FilterSet(sources=["EOS"])
    custom = select_effective_filters("x", global_filters, overrides, modes, defaults, context)
    assert custom.sources == ["EOS"]

    unscoped = select_effective_filters(None, global_filters, overrides, modes, defaults, context)
    assert unscoped.sources == ["Microsoft"]
    assert global_filters.sources == ["Microsoft"]


def test_unknown_customer_inherits(context) -> None:
    """Test that customers without a mode inherit."""
    effective = select_effective_filters(
        "new", FilterSet(sources=["EOS"]), {}, {}, FilterSet(), context
    )
    assert effective.sources == ["EOS"]


def test_missing_global_uses_defaults(context) -> None:
    """Test defaults when no global filters are stored."""
    defaults = FilterSet(sources=["Microsoft", "EOS"])
    effective = select_effective_filters(None, None, {}, {}, defaults, context)
    assert effective is defaults


def test_override_is_normalized_independently(context) -> None:
    """Test normalization of a custom override."""
    overrides = {"x": FilterSet(sources=["EOS"], products=["Gone product"])}
    modes = {"x": FilterMode.CUSTOM}

    effective = select_effective_filters(
        "x", FilterSet(sources=["Microsoft"]), overrides, modes, FilterSet(), context
    )

    assert effective.products == ["Fast Invoice", "Warehouse Pro"]


def test_strip_targeting_fields() -> None:
    """Test stripping of targeting fields."""
    filters = FilterSet(
        target_customer_ids=["a"], target_group_ids=["g"], target_owners=["o"], sources=["EOS"]
    )

    stripped = strip_targeting_fields(filters)

    assert stripped.target_customer_ids == []
    assert stripped.target_group_ids == []
    assert stripped.target_owners == []
    assert stripped.sources == ["EOS"]
    assert filters.target_customer_ids == ["a"]


@pytest.fixture
def customers():
    return [
        Customer(id="c1", name="Acme", owner="anna"),
        Customer(id="c2", name="Globex", owner="bruno"),
        Customer(id="c3", name="Initech", owner="anna"),
        Customer(id="c4", name="Dormant", owner="anna", is_active=False),
    ]


@pytest.fixture
def groups():
    return [CustomerGroup(id="g1", name="Retail", customer_ids=["c2", "c3"])]


def test_audience_without_targeting(customers, groups) -> None:
    """Test audience with no targeting."""
    assert resolve_audience(FilterSet(), customers, groups) == ["c1", "c2", "c3"]


def test_audience_by_ids_and_groups(customers, groups) -> None:
    """Test audience from ids and groups."""
    filters = FilterSet(target_customer_ids=["c1"], target_group_ids=["g1"])
    assert resolve_audience(filters, customers, groups) == ["c1", "c2", "c3"]


def test_audience_by_owner(customers, groups) -> None:
    """Test audience from owners."""
    assert resolve_audience(FilterSet(target_owners=["anna"]), customers, groups) == ["c1", "c3"]


def test_audience_owner_and_group_intersect(customers, groups) -> None:
    """Test audience intersection of owners and groups."""
    filters = FilterSet(target_owners=["anna"], target_group_ids=["g1"])
    assert resolve_audience(filters, customers, groups) == ["c3"]


def test_audience_drops_inactive(customers, groups) -> None:
    """Test that inactive customers are dropped."""
    assert resolve_audience(FilterSet(target_customer_ids=["c4"]), customers, groups) == []

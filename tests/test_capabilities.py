"""Tests for the source capability table."""

from update_lens.core import FilterKey, ReleaseSource, is_filter_supported, resolve_active_sources
from update_lens.core.capabilities import (
    active_supported_sources,
    is_filter_visible,
    supported_sources_for_filter,
)


def test_wave_only_for_release_plans() -> None:
    """Test that wave applies only to release plans."""
    assert is_filter_supported(ReleaseSource.MICROSOFT, FilterKey.WAVE)
    assert not is_filter_supported(ReleaseSource.EOS, FilterKey.WAVE)


def test_min_version_only_for_partner_apps() -> None:
    """Test that the version floor applies only to partner apps."""
    assert is_filter_supported("EOS", FilterKey.BC_MIN_VERSION)
    assert not is_filter_supported("Microsoft", FilterKey.BC_MIN_VERSION)


def test_shared_dimensions() -> None:
    """Test dimensions supported by both sources."""
    for key in (FilterKey.STATUS, FilterKey.PRODUCT_OR_APP, FilterKey.MONTHS, FilterKey.QUERY):
        assert supported_sources_for_filter(key) == [ReleaseSource.MICROSOFT, ReleaseSource.EOS]


def test_resolve_active_sources_empty_means_all() -> None:
    """Test that an empty source selection resolves to all sources."""
    assert resolve_active_sources([]) == [ReleaseSource.MICROSOFT, ReleaseSource.EOS]
    assert resolve_active_sources(["EOS"]) == [ReleaseSource.EOS]


def test_filter_visibility_follows_active_sources() -> None:
    """Test control visibility for the active sources."""
    assert not is_filter_visible(["EOS"], FilterKey.WAVE)
    assert is_filter_visible(["EOS", "Microsoft"], FilterKey.WAVE)
    assert active_supported_sources(["Microsoft"], FilterKey.BC_MIN_VERSION) == []

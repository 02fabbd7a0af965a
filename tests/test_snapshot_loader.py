"""Tests for the JSON snapshot loader."""

import json
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from update_lens.adapters.snapshots import JsonSnapshotLoader
from update_lens.adapters.snapshots.json_snapshot_loader import (
    eos_app_info,
    eos_product_id,
    eos_id_to_iso_date,
    month_to_iso_date,
    resolve_release_date,
)
from update_lens.core import PartnerAppRecord, ReleasePlanRecord, ReleaseStatus

SNAPSHOT = {
    "version": 3,
    "items": [
        {
            "source": "Microsoft",
            "id": "ms-1",
            "product_name": "Dynamics 365 Sales",
            "title": "Copilot in opportunities",
            "status": "Planned",
            "availability_date": "2025-03",
            "availability_date_full": "2025-03-14",
            "wave": "2025 Wave 1",
            "availability_types": ["Users, automatically"],
            "tags": ["AI"],
            "unexpected_field": "ignored",
        },
        {
            "source": "EOS",
            "id": "warehouse-pro-05-02-25",
            "title": "Warehouse Pro (WHP)",
            "summary": "Barcode scanning from mobile",
            "status": "Shipped",
            "availability_date": "2025-02",
            "min_bc_version": 22,
        },
    ],
}


def test_date_helpers() -> None:
    """Test release date helpers."""
    assert month_to_iso_date("2025-03") == "2025-03-01"
    assert month_to_iso_date("March 2025") is None
    assert month_to_iso_date(None) is None
    assert eos_id_to_iso_date("warehouse-pro-05-02-25") == "2025-02-05"
    assert eos_id_to_iso_date("warehouse-pro") is None


def test_resolve_release_date_fallbacks() -> None:
    """Test release date fallbacks."""
    assert resolve_release_date({"source": "Microsoft", "first_available_date": "2025-04"}) == "2025-04-01"
    assert resolve_release_date({"source": "EOS", "id": "x", "availability_date": "2025-06"}) == "2025-06-01"
    assert resolve_release_date({"source": "EOS", "id": "x"}) == date.today().isoformat()


def test_parse_payload_builds_record_variants() -> None:
    """Test parsing a snapshot into record variants."""
    result = JsonSnapshotLoader.parse_payload(SNAPSHOT)

    assert result.errors == []
    plan, app = result.items

    assert isinstance(plan, ReleasePlanRecord)
    assert plan.release_date == "2025-03-14"
    assert plan.availability_types == ("Users, automatically",)
    assert plan.tags == ("AI",)

    assert isinstance(app, PartnerAppRecord)
    assert app.release_date == "2025-02-05"
    assert app.status is ReleaseStatus.UNKNOWN
    assert app.min_bc_version == 22
    assert app.product_name == "Warehouse Pro"
    assert app.product_id == "EOS:WHP"
    assert app.description == "Barcode scanning from mobile"


def test_parse_payload_keeps_explicit_release_date() -> None:
    """Test that explicit release dates are kept."""
    entry = dict(SNAPSHOT["items"][0], release_date="2025-01-01")

    result = JsonSnapshotLoader.parse_payload([entry])

    assert result.items[0].release_date == "2025-01-01"


def test_parse_payload_reports_rejected_entries() -> None:
    """Test reporting of rejected entries."""
    payload = [
        "not a mapping",
        {"source": "Elsewhere", "id": "x", "title": "t", "product_name": "p"},
        {"source": "EOS", "id": "eos-9", "product_name": "Warehouse Pro", "availability_date": "2025-01"},
        {"source": "EOS", "id": "", "title": "Empty id", "product_name": "p", "availability_date": "2025-01"},
        SNAPSHOT["items"][1],
    ]

    result = JsonSnapshotLoader.parse_payload(payload)

    assert [item.id for item in result.items] == ["warehouse-pro-05-02-25"]
    assert len(result.errors) == 4
    assert result.errors[0] == "Entry 0: not a mapping"
    assert "Unknown source" in result.errors[1]
    assert "Malformed record" in result.errors[2]
    assert "Id cannot be empty" in result.errors[3]


def test_parse_payload_rejects_scalar_payload() -> None:
    """Test a payload that is neither list nor mapping."""
    result = JsonSnapshotLoader.parse_payload("nope")

    assert result.items == []
    assert result.errors


def test_loader_requires_path_or_url() -> None:
    """Test loader construction without a location."""
    with pytest.raises(ValueError):
        JsonSnapshotLoader()


@pytest.mark.asyncio
async def test_load_from_file(tmp_path: Path) -> None:
    """Test loading from a local file."""
    path = tmp_path / "latest.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")

    result = await JsonSnapshotLoader(path=path).load()

    assert [item.id for item in result.items] == ["ms-1", "warehouse-pro-05-02-25"]


@pytest.mark.asyncio
async def test_load_from_url() -> None:
    """Test loading over HTTP."""
    loader = JsonSnapshotLoader(url="https://example.com/latest.json", timeout=5)

    with patch("httpx.AsyncClient") as mock_client:
        mock_response = Mock()
        mock_response.raise_for_status = Mock()
        mock_response.json = Mock(return_value=SNAPSHOT)

        mock_get = AsyncMock(return_value=mock_response)
        mock_client.return_value.__aenter__.return_value.get = mock_get

        result = await loader.load()

        assert mock_get.call_args.args[0] == "https://example.com/latest.json"
        assert mock_client.call_args.kwargs["timeout"] == 5
        assert len(result.items) == 2


@pytest.mark.asyncio
async def test_load_from_url_propagates_http_errors() -> None:
    """Test HTTP error propagation."""
    loader = JsonSnapshotLoader(url="https://example.com/latest.json")

    with patch("httpx.AsyncClient") as mock_client:
        mock_response = Mock()
        mock_response.raise_for_status = Mock(side_effect=httpx.HTTPError("Not found"))
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=mock_response)

        with pytest.raises(httpx.HTTPError):
            await loader.load()


def test_eos_title_parsing() -> None:
    """Test splitting partner titles into app name and acronym."""
    assert eos_app_info("  Warehouse Pro (WHP) ") == ("Warehouse Pro", "WHP")
    assert eos_app_info("Fast Invoice") == ("Fast Invoice", "APP")
    assert eos_app_info("") == ("EOS App", "APP")
    assert eos_product_id("Warehouse Pro", "whp") == "EOS:WHP"
    assert eos_product_id("Fast Invoice 2", "") == "EOS:FASTINVOICE2"


def test_release_plan_entries_get_planner_link_and_try_now() -> None:
    """Test release-plan entries derive their planner link and try-now flag."""
    plan_id = "0b1c2d3e-4f50-6172-8394-a5b6c7d8e9f0"
    entry = {
        "source": "Microsoft",
        "id": "ms-7",
        "product": "Dynamics 365 Sales",
        "title": "Forecast insights",
        "status": "Try now",
        "summary": "Insights on forecasts",
        "availability_date": "2025-04",
        "source_plan_id": plan_id,
        "learn_url": "not a url",
    }

    record = JsonSnapshotLoader.parse_payload([entry]).items[0]

    assert record.product_name == "Dynamics 365 Sales"
    assert record.try_now is True
    assert record.description == "Insights on forecasts"
    assert record.source_url == f"https://releaseplans.microsoft.com/?app=Sales&planID={plan_id}"
    assert record.learn_url is None


def test_release_plan_without_guid_has_no_link() -> None:
    """Test that a non-GUID plan id yields no planner link."""
    entry = dict(SNAPSHOT["items"][0], source_plan_id="plan-7", source_url="https://example.com")

    record = JsonSnapshotLoader.parse_payload([entry]).items[0]

    assert record.source_url is None
    assert record.try_now is False


def test_partner_links_must_be_http() -> None:
    """Test partner entries keep only http(s) source links."""
    valid = dict(SNAPSHOT["items"][1], url="https://apps.example.com/whp")
    invalid = dict(SNAPSHOT["items"][1], source_url="javascript:alert(1)")

    result = JsonSnapshotLoader.parse_payload([valid, invalid])

    assert [item.source_url for item in result.items] == ["https://apps.example.com/whp", None]


def test_parse_payload_rejects_non_numeric_version() -> None:
    """Test that a textual minimum version is reported instead of loaded."""
    entry = dict(SNAPSHOT["items"][1], min_bc_version="22")

    result = JsonSnapshotLoader.parse_payload([entry])

    assert result.items == []
    assert "min_bc_version" in result.errors[0]


def test_parse_payload_wraps_scalar_sequences() -> None:
    """Test that a single tag given as a string stays one tag."""
    entry = dict(SNAPSHOT["items"][1], tags="Mobile", geography_countries=["Italy"])

    record = JsonSnapshotLoader.parse_payload([entry]).items[0]

    assert record.tags == ("Mobile",)
    assert record.geography_countries == ("Italy",)


def test_parse_payload_rejects_mapping_tags() -> None:
    """Test that a mapping in a list field is reported."""
    entry = dict(SNAPSHOT["items"][1], tags={"name": "Mobile"})

    result = JsonSnapshotLoader.parse_payload([entry])

    assert result.items == []
    assert "'tags' must be a list" in result.errors[0]

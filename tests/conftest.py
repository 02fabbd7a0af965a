"""Shared fixtures."""

from datetime import date

import pytest

from update_lens.core import PartnerAppRecord, ReleasePlanRecord, ReleaseStatus


def make_plan(**overrides) -> ReleasePlanRecord:
    data = {
        "id": "ms-1",
        "product_name": "Sales",
        "title": "Copilot in opportunities",
        "status": ReleaseStatus.PLANNED,
        "availability_date": "2025-03",
        "release_date": "2025-03-10",
        "description": "Summaries for opportunities",
    }
    data.update(overrides)
    return ReleasePlanRecord(**data)


def make_app(**overrides) -> PartnerAppRecord:
    data = {
        "id": "eos-1",
        "product_name": "Warehouse Pro",
        "title": "Barcode scanning",
        "status": ReleaseStatus.LAUNCHED,
        "availability_date": "2025-03",
        "release_date": "2025-03-20",
        "description": "Scan barcodes from mobile",
    }
    data.update(overrides)
    return PartnerAppRecord(**data)


@pytest.fixture
def today() -> date:
    return date(2025, 3, 25)


@pytest.fixture
def records() -> list:
    return [
        make_plan(id="ms-1", product_name="Sales", wave="2025 Wave 1", tags=("AI",),
                  availability_types=("Users, automatically",), enabled_for="Users"),
        make_plan(id="ms-2", product_name="sales", title="Forecasting", status=ReleaseStatus.LAUNCHED,
                  availability_date="2025-02", release_date="2025-02-01", wave="2024 Wave 2",
                  geography_countries=("Italy", "France")),
        make_plan(id="ms-3", product_name="Field Service", title="Scheduling board",
                  availability_date="2025-01", release_date="2025-01-15", category="Service",
                  language="English"),
        make_app(id="eos-1", product_name="Warehouse Pro", min_bc_version=22, tags=("Mobile",)),
        make_app(id="eos-2", product_name="Fast Invoice", title="E-invoicing", min_bc_version=20,
                 availability_date="2025-02", release_date="2025-02-14",
                 geography="<ul><li>Italy</li><li>Spain</li></ul>"),
    ]

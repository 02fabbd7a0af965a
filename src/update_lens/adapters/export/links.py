"""Validation of links printed in exported updates."""

import re
from urllib.parse import parse_qs, urlencode, urlparse

RELEASEPLANS_BASE_URL = "https://releaseplans.microsoft.com/"
RELEASEPLANS_HOST = "releaseplans.microsoft.com"
GUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_valid_guid(value: str) -> bool:
    return bool(GUID_PATTERN.match(value or ""))


def is_valid_http_url(url: str | None) -> bool:
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def build_release_plans_url(app_name: str, plan_id: str) -> str:
    return f"{RELEASEPLANS_BASE_URL}?{urlencode({'app': app_name, 'planID': plan_id})}"


def is_release_plans_url(url: str | None) -> bool:
    """Deep link into the release planner: https, root path, app + planID."""
    if not url:
        return False
    parsed = urlparse(url)
    if parsed.scheme != "https" or parsed.hostname != RELEASEPLANS_HOST:
        return False
    if parsed.path not in ("", "/"):
        return False
    params = parse_qs(parsed.query)
    return "app" in params and "planID" in params


# Product name -> app name used by the release planner
APP_MAPPINGS = [
    (re.compile(r"business central", re.IGNORECASE), "Business Central"),
    (re.compile(r"dynamics 365 sales", re.IGNORECASE), "Sales"),
    (re.compile(r"customer insights\s*-\s*journeys", re.IGNORECASE), "Customer Insights - Journeys"),
    (re.compile(r"customer insights\s*-\s*data", re.IGNORECASE), "Customer Insights - Data"),
    (re.compile(r"field service", re.IGNORECASE), "Field Service"),
    (re.compile(r"customer service", re.IGNORECASE), "Customer Service"),
    (re.compile(r"finance", re.IGNORECASE), "Finance"),
    (re.compile(r"supply chain", re.IGNORECASE), "Supply Chain Management"),
    (re.compile(r"commerce", re.IGNORECASE), "Commerce"),
    (re.compile(r"human resources", re.IGNORECASE), "Human Resources"),
    (re.compile(r"project operations", re.IGNORECASE), "Project Operations"),
    (re.compile(r"power platform", re.IGNORECASE), "Power Platform"),
    (re.compile(r"power apps", re.IGNORECASE), "Power Apps"),
    (re.compile(r"power automate", re.IGNORECASE), "Power Automate"),
    (re.compile(r"power bi", re.IGNORECASE), "Power BI"),
    (re.compile(r"copilot studio", re.IGNORECASE), "Copilot Studio"),
    (re.compile(r"intelligent order management", re.IGNORECASE), "Intelligent Order Management"),
    (re.compile(r"sustainability manager", re.IGNORECASE), "Microsoft Sustainability Manager"),
]
PRODUCT_PREFIX = re.compile(r"^(Microsoft\s+)?(Dynamics\s*365\s*)?", re.IGNORECASE)


def resolve_app_name(product: str | None) -> str | None:
    """Release planner app name for a catalog product, or None."""
    if not product:
        return None
    for pattern, app_name in APP_MAPPINGS:
        if pattern.search(product):
            return app_name
    return PRODUCT_PREFIX.sub("", product).strip() or None


def resolve_release_plans_link(plan_id: str | None, app_name: str | None) -> str | None:
    """Deep link for a plan; None unless the plan id is a GUID."""
    plan_id = (plan_id or "").strip()
    if not plan_id or not app_name or not is_valid_guid(plan_id):
        return None
    url = build_release_plans_url(app_name, plan_id)
    return url if is_release_plans_url(url) else None

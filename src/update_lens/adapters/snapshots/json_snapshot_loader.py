"""JSON snapshot loader for release records (local file or HTTP)."""

import json
import re
from datetime import date
from pathlib import Path
from typing import Any, Optional

import httpx

from update_lens.adapters.export.links import (
    is_valid_http_url,
    resolve_app_name,
    resolve_release_plans_link,
)
from update_lens.core import (
    ReleaseSource,
    ReleaseStatus,
    SnapshotLoader,
    SnapshotLoadResult,
    record_from_dict,
)

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
EOS_ID_DATE = re.compile(r"-(\d{2})-(\d{2})-(\d{2})$")
EOS_TITLE = re.compile(r"^(.*)\s+\(([^)]+)\)\s*$")
NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def month_to_iso_date(value: Optional[str]) -> Optional[str]:
    """``2025-03`` -> ``2025-03-01``; anything else -> None."""
    if not value or not MONTH_PATTERN.match(value):
        return None
    return f"{value}-01"


def eos_id_to_iso_date(item_id: Optional[str]) -> Optional[str]:
    """Partner ids end with ``-DD-MM-YY``; turn that suffix into a date."""
    match = EOS_ID_DATE.search(item_id or "")
    if not match:
        return None
    day, month, year = match.groups()
    return f"{2000 + int(year)}-{month}-{day}"


def resolve_release_date(entry: dict[str, Any]) -> str:
    """Release date of an entry that does not carry one."""
    if entry.get("source") == ReleaseSource.EOS.value:
        candidate = eos_id_to_iso_date(entry.get("id"))
    else:
        full = entry.get("availability_date_full") or entry.get("first_available_date")
        candidate = (month_to_iso_date(full) or full) if full else None

    return (
        candidate
        or month_to_iso_date(entry.get("availability_date"))
        or date.today().isoformat()
    )


def eos_app_info(title: str) -> tuple[str, str]:
    """Split a partner title like ``Warehouse Pro (WHP)`` into name and acronym."""
    trimmed = title.strip()
    match = EOS_TITLE.match(trimmed)
    if not match:
        return trimmed or "EOS App", "APP"
    return match.group(1).strip(), match.group(2).strip()


def eos_product_id(name: str, acronym: str) -> str:
    if acronym:
        return f"EOS:{acronym.upper()}"
    return f"EOS:{NON_ALNUM.sub('', name.upper()) or 'APP'}"


def normalize_entry(entry: dict[str, Any]) -> dict[str, Any]:
    """
    Fill the derived fields of a raw snapshot entry.

    Partner entries take their product from the title, release-plan entries
    get a planner deep link built from their plan id. Links that are not
    valid http(s) URLs are dropped.
    """
    data = dict(entry)
    source = data.get("source")

    if source == ReleaseSource.EOS.value:
        name, acronym = eos_app_info(str(data.get("title") or ""))
        data["product_id"] = eos_product_id(name, acronym)
        data["product"] = name
        data["product_name"] = name
        data["try_now"] = False
    elif source == ReleaseSource.MICROSOFT.value:
        product = str(data.get("product") or data.get("product_name") or "")
        if product:
            data["product_name"] = product
        data["try_now"] = data.get("status") == ReleaseStatus.TRY_NOW.value
        app_name = str(data.get("source_app_name") or "").strip() or resolve_app_name(product)
        data["source_url"] = resolve_release_plans_link(data.get("source_plan_id"), app_name)

    if source != ReleaseSource.MICROSOFT.value:
        candidate = str(data.get("source_url") or data.get("url") or "").strip()
        data["source_url"] = candidate if is_valid_http_url(candidate) else None

    if data.get("summary"):
        data["description"] = data["summary"]

    if not is_valid_http_url(data.get("learn_url")):
        data["learn_url"] = None

    if not data.get("release_date"):
        data["release_date"] = resolve_release_date(data)

    return data


class JsonSnapshotLoader(SnapshotLoader):
    """Load a ``{"version": n, "items": [...]}`` snapshot."""

    def __init__(
        self,
        path: Optional[Path] = None,
        url: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        if path is None and not url:
            raise ValueError("Either path or url is required")
        self.path = path
        self.url = url
        self.timeout = timeout

    async def load(self) -> SnapshotLoadResult:
        """Fetch the snapshot and coerce every entry into a record.

        Entries that cannot be coerced are reported in ``errors``.
        """
        payload = await self._fetch_payload()
        return self.parse_payload(payload)

    async def _fetch_payload(self) -> Any:
        if self.url:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                return response.json()

        return json.loads(self.path.read_text(encoding="utf-8"))

    @staticmethod
    def parse_payload(payload: Any) -> SnapshotLoadResult:
        if isinstance(payload, dict):
            entries = payload.get("items", [])
        elif isinstance(payload, list):
            entries = payload
        else:
            return SnapshotLoadResult(items=[], errors=["Snapshot payload is not a list or mapping"])

        result = SnapshotLoadResult(items=[])
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                result.errors.append(f"Entry {index}: not a mapping")
                continue

            try:
                result.items.append(record_from_dict(normalize_entry(entry)))
            except ValueError as e:
                result.errors.append(f"Entry {index} ({entry.get('id', '?')}): {e}")

        return result

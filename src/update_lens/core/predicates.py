"""Item filter engine: applies a resolved filter set to release records."""

import calendar
import re
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from update_lens.core.capabilities import FilterKey, is_filter_supported
from update_lens.core.entities import ReleaseRecord, ReleaseSource
from update_lens.core.filter_set import FilterSet, SortOrder
from update_lens.core.labels import normalize_product_label
from update_lens.core.metadata import record_countries

DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")

Check = Callable[[ReleaseRecord], bool]


def parse_month(value: Optional[str]) -> Optional[date]:
    """First day of a ``YYYY-MM`` month, or None."""
    match = MONTH_PATTERN.match((value or "").strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not year or not 1 <= month <= 12:
        return None
    return date(year, month, 1)


def parse_date_any(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM`` (first day of the month)."""
    text = (value or "").strip()
    if DAY_PATTERN.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    return parse_month(text)


def add_months(day: date, months: int) -> date:
    index = day.year * 12 + day.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def within_last_days(day: Optional[date], days: int, today: date) -> bool:
    if day is None:
        return False
    return today - timedelta(days=days) <= day <= today


def within_next_days(day: Optional[date], days: int, today: date) -> bool:
    if day is None:
        return False
    return today <= day <= today + timedelta(days=days)


def _build_product_sources(records: Iterable[ReleaseRecord]) -> dict[str, set[ReleaseSource]]:
    product_sources: dict[str, set[ReleaseSource]] = {}
    for record in records:
        label = normalize_product_label(record.product_name)
        if label:
            product_sources.setdefault(label, set()).add(record.source)
    return product_sources


def _gated(key: FilterKey, check: Check) -> Check:
    """Pass records whose source does not support ``key``."""
    def gated_check(record: ReleaseRecord) -> bool:
        if not is_filter_supported(record.source, key):
            return True
        return check(record)
    return gated_check


def _single_value(selected: list[str], attribute: str) -> Check:
    allowed = set(selected)
    return lambda record: getattr(record, attribute, None) in allowed


def _any_value(selected: list[str], extract: Callable[[ReleaseRecord], Iterable[str]]) -> Check:
    allowed = set(selected)
    return lambda record: any(value in allowed for value in extract(record))


def build_checks(
    records: list[ReleaseRecord],
    filters: FilterSet,
    today: Optional[date] = None,
) -> list[tuple[str, Check]]:
    """
    Named predicates for every dimension the filter set restricts.

    Empty selections and zero/unset scalars add no predicate. Every
    dimension except sources and the horizon/history window is gated by
    the capability table.
    """
    today = today or date.today()
    checks: list[tuple[str, Check]] = []

    if filters.sources:
        allowed_sources = set(filters.sources)
        checks.append(("sources", lambda r: r.source.value in allowed_sources))

    if filters.statuses:
        allowed_statuses = set(filters.statuses)
        checks.append(("statuses", _gated(
            FilterKey.STATUS, lambda r: r.status.value in allowed_statuses
        )))

    if filters.products:
        selected = {normalize_product_label(p) for p in filters.products} - {""}
        product_sources = _build_product_sources(records)
        selected_sources = set()
        for product in selected:
            selected_sources.update(product_sources.get(product, ()))

        def product_check(record: ReleaseRecord) -> bool:
            # One source's product picks must not hide another source's records
            if record.source not in selected_sources:
                return True
            return normalize_product_label(record.product_name) in selected

        checks.append(("products", _gated(FilterKey.PRODUCT_OR_APP, product_check)))

    single_valued = [
        ("categories", FilterKey.CATEGORIES, "category"),
        ("waves", FilterKey.WAVE, "wave"),
        ("enabled_for", FilterKey.ENABLED_FOR, "enabled_for"),
        ("language", FilterKey.LANGUAGE, "language"),
    ]
    for name, key, attribute in single_valued:
        selection = getattr(filters, name)
        if selection:
            checks.append((name, _gated(key, _single_value(selection, attribute))))

    if filters.availability_types:
        checks.append(("availability_types", _gated(
            FilterKey.AVAILABILITY_TYPE,
            _any_value(filters.availability_types, lambda r: getattr(r, "availability_types", ())),
        )))

    if filters.geography:
        checks.append(("geography", _gated(
            FilterKey.GEOGRAPHY, _any_value(filters.geography, record_countries)
        )))

    if filters.min_version is not None:
        floor = filters.min_version

        def version_check(record: ReleaseRecord) -> bool:
            version = getattr(record, "min_bc_version", None)
            return version is None or version >= floor

        checks.append(("min_version", _gated(FilterKey.BC_MIN_VERSION, version_check)))

    if filters.tags:
        checks.append(("tags", _gated(FilterKey.TAGS, _any_value(filters.tags, lambda r: r.tags))))

    if filters.months:
        allowed_months = set(filters.months)
        checks.append(("months", _gated(
            FilterKey.MONTHS, lambda r: r.availability_date in allowed_months
        )))

    horizon = add_months(today, filters.horizon_months)
    history = add_months(today, -filters.history_months)

    def window_check(record: ReleaseRecord) -> bool:
        month = parse_month(record.availability_date)
        if month is None:
            return True
        return history <= month <= horizon

    checks.append(("horizon", window_check))

    if filters.period_new_days > 0:
        new_days = filters.period_new_days
        checks.append(("period_new_days", _gated(
            FilterKey.PERIOD_NEW_DAYS,
            lambda r: within_last_days(parse_date_any(r.release_date), new_days, today),
        )))

    if filters.period_changed_days > 0:
        changed_days = filters.period_changed_days

        def changed_check(record: ReleaseRecord) -> bool:
            updated = parse_date_any(record.last_updated_date) or parse_date_any(record.release_date)
            return within_last_days(updated, changed_days, today)

        checks.append(("period_changed_days", _gated(FilterKey.PERIOD_CHANGED_DAYS, changed_check)))

    if filters.release_in_days > 0:
        release_days = filters.release_in_days
        checks.append(("release_in_days", _gated(
            FilterKey.RELEASE_IN_DAYS,
            lambda r: within_next_days(parse_date_any(r.release_date), release_days, today),
        )))

    date_from = parse_date_any(filters.release_date_from)
    date_to = parse_date_any(filters.release_date_to)
    if date_from or date_to:
        def range_check(record: ReleaseRecord) -> bool:
            released = parse_date_any(record.release_date)
            if date_from and (released is None or released < date_from):
                return False
            if date_to and (released is None or released > date_to):
                return False
            return True

        checks.append(("release_date_range", _gated(FilterKey.RELEASE_DATE_RANGE, range_check)))

    query = filters.query.strip().lower()
    if query:
        def query_check(record: ReleaseRecord) -> bool:
            haystack = f"{record.title} {record.description} {record.product_name}".lower()
            return query in haystack

        checks.append(("query", _gated(FilterKey.QUERY, query_check)))

    return checks


def filter_release_items(
    records: list[ReleaseRecord],
    filters: FilterSet,
    today: Optional[date] = None,
) -> list[ReleaseRecord]:
    """Records passing every dimension of ``filters``, in input order."""
    checks = build_checks(records, filters, today)
    return [record for record in records if all(check(record) for _, check in checks)]


def restriction_report(
    records: list[ReleaseRecord],
    filters: FilterSet,
    today: Optional[date] = None,
) -> dict[str, int]:
    """How many records each restricting dimension excludes on its own.

    Sorted most restrictive first; dimensions excluding nothing are left out.
    """
    report = {}
    for name, check in build_checks(records, filters, today):
        excluded = sum(1 for record in records if not check(record))
        if excluded:
            report[name] = excluded
    return dict(sorted(report.items(), key=lambda entry: entry[1], reverse=True))


def sort_key(record: ReleaseRecord) -> date:
    """Release date, falling back to the first day of the availability month."""
    return (
        parse_date_any(record.release_date)
        or parse_month(record.availability_date)
        or date.min
    )


def sort_release_items(
    records: list[ReleaseRecord], sort_order: SortOrder = SortOrder.NEWEST
) -> list[ReleaseRecord]:
    return sorted(records, key=sort_key, reverse=sort_order is SortOrder.NEWEST)

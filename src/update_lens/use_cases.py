"""Business logic use cases."""

from datetime import date, datetime
from pathlib import Path
from typing import Optional

from update_lens.config import DefaultsConfig
from update_lens.core import (
    CustomerDirectory,
    EmptySelectionPolicy,
    FilterMode,
    FilterSet,
    FilterStore,
    FilterStoreState,
    ReleaseExporter,
    ReleaseRecord,
    SnapshotLoader,
    build_filter_metadata,
    build_normalization_context,
    create_default_filters,
    filter_release_items,
    normalize_filters,
    resolve_audience,
    restriction_report,
    select_effective_filters,
    sort_release_items,
    strip_targeting_fields,
)
from update_lens.core.entities import RELEASE_SOURCE_LABELS, ReleaseSource


class ReleaseFeedService:
    """Filter resolution and item selection over one loaded snapshot."""

    def __init__(
        self,
        records: list[ReleaseRecord],
        defaults: Optional[DefaultsConfig] = None,
        directory: Optional[CustomerDirectory] = None,
    ) -> None:
        self.records = records
        self.defaults = defaults or DefaultsConfig()
        self.directory = directory or CustomerDirectory()
        self.metadata = build_filter_metadata(records)
        self.context = build_normalization_context(records, self.metadata)

    def default_filters(self) -> FilterSet:
        """Defaults: every known product, configured sources and statuses."""
        return create_default_filters(
            product_options=[option.value for option in self.metadata.products],
            source_options=list(self.defaults.sources),
            status_options=list(self.defaults.statuses),
            horizon_months=self.defaults.horizon_months,
            history_months=self.defaults.history_months,
        )

    def normalized_global(
        self,
        state: FilterStoreState,
        empty_policy: EmptySelectionPolicy = EmptySelectionPolicy.UNRESTRICTED,
    ) -> FilterSet:
        return normalize_filters(
            state.global_filters, self.default_filters(), self.context, empty_policy
        )

    def effective_filters(self, state: FilterStoreState, customer_id: Optional[str]) -> FilterSet:
        return select_effective_filters(
            customer_id,
            state.global_filters,
            state.customer_filters,
            state.customer_modes,
            self.default_filters(),
            self.context,
        )

    def visible_items(self, filters: FilterSet, today: Optional[date] = None) -> list[ReleaseRecord]:
        """Filtered and sorted records for a resolved filter set."""
        item_filters = strip_targeting_fields(filters)
        filtered = filter_release_items(self.records, item_filters, today)
        return sort_release_items(filtered, item_filters.sort_order)

    def explain(self, filters: FilterSet, today: Optional[date] = None) -> dict[str, int]:
        return restriction_report(self.records, strip_targeting_fields(filters), today)

    def audience(self, filters: FilterSet) -> list[str]:
        return resolve_audience(filters, self.directory.customers, self.directory.groups)

    def switch_mode(self, state: FilterStoreState, customer_id: str, mode: FilterMode) -> None:
        state.switch_mode(customer_id, mode, self.normalized_global(state))

    def freeze_global_for_customers(
        self, state: FilterStoreState, customer_ids: list[str]
    ) -> FilterSet:
        """Copy the global filters into custom overrides.

        Empty selections are materialized into the values known today, so
        the customers keep exactly what they see now when new data arrives.
        """
        frozen = self.normalized_global(state, EmptySelectionPolicy.RESTRICTIVE)
        state.apply_global_to_customers(customer_ids, strip_targeting_fields(frozen))
        return frozen


class UpdateExportService:
    """Service for exporting filtered release updates per customer."""

    def __init__(
        self,
        loader: SnapshotLoader,
        store: FilterStore,
        exporter: ReleaseExporter,
        directory: Optional[CustomerDirectory] = None,
        defaults: Optional[DefaultsConfig] = None,
    ) -> None:
        self.loader = loader
        self.store = store
        self.exporter = exporter
        self.directory = directory or CustomerDirectory()
        self.defaults = defaults or DefaultsConfig()

    async def load_feed(self) -> ReleaseFeedService:
        """Load the snapshot and build the feed service around it."""
        print("\n" + "=" * 70)
        print("📥 LOADING SNAPSHOT")
        print("=" * 70)

        result = await self.loader.load()
        print(f"✓ Records loaded: {len(result.items)}")
        if result.errors:
            print(f"⚠️  Rejected entries: {len(result.errors)}")
            for error in result.errors[:10]:
                print(f"  └─ {error}")

        feed = ReleaseFeedService(result.items, self.defaults, self.directory)
        if feed.metadata.is_empty:
            print("⚠️  Warning: Snapshot contains no usable records")
            return feed

        for option in feed.metadata.sources:
            label = RELEASE_SOURCE_LABELS[ReleaseSource(option.value)]
            print(f"  • {label}: {option.count}")

        return feed

    async def export(
        self,
        customer_id: Optional[str] = None,
        output: Optional[Path] = None,
        output_dir: Path = Path("exports"),
        today: Optional[date] = None,
    ) -> tuple[Path, list[ReleaseRecord]]:
        """Resolve filters for a customer, export the visible items, save filters.

        Returns:
            Tuple of (output path, exported records)
        """
        feed = await self.load_feed()

        state = self.store.load()
        state.ensure_global_filters(feed.default_filters())

        filters = feed.effective_filters(state, customer_id)
        records = feed.visible_items(filters, today)

        customer = self.directory.get(customer_id) if customer_id else None
        customer_name = customer.name if customer else (customer_id or "All customers")

        print("\n" + "=" * 70)
        print(f"📝 EXPORT: {customer_name}")
        print("=" * 70)
        print(f"✓ Visible records: {len(records)}")
        if not records:
            report = feed.explain(filters, today)
            if report:
                print("Most restrictive filters:")
                for dimension, excluded in report.items():
                    print(f"  • {dimension}: excludes {excluded}")

        content = self.exporter.render(records, customer_name)

        if output is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            slug = customer_id or "all"
            output = output_dir / f"{timestamp}_{slug}.md"
        self.exporter.save(content, output)

        self._store_normalized(feed, state, customer_id, filters)
        return output, records

    def _store_normalized(
        self,
        feed: ReleaseFeedService,
        state: FilterStoreState,
        customer_id: Optional[str],
        filters: FilterSet,
    ) -> None:
        """Write repaired filters back so stale values do not linger."""
        state.set_global_filters(feed.normalized_global(state))
        if customer_id and customer_id in state.customer_filters:
            if state.mode_for(customer_id) is FilterMode.CUSTOM:
                state.set_customer_filters(customer_id, filters)
        self.store.save(state)

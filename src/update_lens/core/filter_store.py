"""Stored global and per-customer filters."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from update_lens.core.entities import FilterMode
from update_lens.core.filter_set import FilterSet


@dataclass
class FilterStoreState:
    """In-memory filter state; persisted only through ``FilterStore.save``."""

    global_filters: Optional[FilterSet] = None
    customer_filters: dict[str, FilterSet] = field(default_factory=dict)
    customer_modes: dict[str, FilterMode] = field(default_factory=dict)

    def mode_for(self, customer_id: str) -> FilterMode:
        return self.customer_modes.get(customer_id, FilterMode.INHERIT)

    def set_global_filters(self, filters: FilterSet) -> None:
        self.global_filters = filters

    def ensure_global_filters(self, defaults: FilterSet) -> None:
        if self.global_filters is None:
            self.global_filters = defaults

    def set_customer_filters(self, customer_id: str, filters: FilterSet) -> None:
        self.customer_filters[customer_id] = filters

    def set_customer_mode(self, customer_id: str, mode: FilterMode) -> None:
        self.customer_modes[customer_id] = mode

    def switch_mode(
        self, customer_id: str, mode: FilterMode, normalized_global: FilterSet
    ) -> None:
        """Change a customer's mode, seeding a custom override from global."""
        if mode is FilterMode.CUSTOM and customer_id not in self.customer_filters:
            self.customer_filters[customer_id] = normalized_global
        self.customer_modes[customer_id] = mode

    def update_filters(
        self,
        customer_id: Optional[str],
        changes: dict[str, Any],
        normalized_global: FilterSet,
    ) -> FilterSet:
        """
        Apply an edit made while viewing ``customer_id`` (None = global view).

        Editing an inheriting customer detaches it: it switches to custom
        mode with the global filters as the starting point.
        """
        if not customer_id:
            self.global_filters = normalized_global.updated(**changes)
            return self.global_filters

        if self.mode_for(customer_id) is FilterMode.INHERIT:
            self.customer_modes[customer_id] = FilterMode.CUSTOM
            base = normalized_global
        else:
            base = self.customer_filters.get(customer_id, normalized_global)

        updated = base.updated(**changes)
        self.customer_filters[customer_id] = updated
        return updated

    def reset_all(self, defaults: FilterSet) -> None:
        self.global_filters = defaults
        self.customer_filters = {}
        self.customer_modes = {}

    def reset_customer(self, customer_id: str) -> None:
        """Forget a customer's override and mode, e.g. when it is deleted."""
        self.customer_filters.pop(customer_id, None)
        self.customer_modes.pop(customer_id, None)

    def remove_group(self, group_id: str) -> None:
        """Drop a deleted group from every target list."""
        def strip(filters: FilterSet) -> FilterSet:
            return filters.updated(
                target_group_ids=[gid for gid in filters.target_group_ids if gid != group_id]
            )

        if self.global_filters is not None:
            self.global_filters = strip(self.global_filters)
        self.customer_filters = {
            customer_id: strip(filters) for customer_id, filters in self.customer_filters.items()
        }

    def apply_global_to_customers(
        self, customer_ids: Iterable[str], global_filters: FilterSet
    ) -> None:
        for customer_id in customer_ids:
            self.customer_filters[customer_id] = global_filters
            self.customer_modes[customer_id] = FilterMode.CUSTOM

    def clear_overrides_for_customers(self, customer_ids: Iterable[str]) -> None:
        for customer_id in customer_ids:
            self.reset_customer(customer_id)


class FilterStore:
    """Persist filter state as YAML files in a directory."""

    GLOBAL_FILE = "global_filters.yaml"
    CUSTOMER_FILE = "customer_filters.yaml"
    MODE_FILE = "customer_modes.yaml"

    def __init__(self, storage_dir: Path, defaults: Optional[FilterSet] = None) -> None:
        self.storage_dir = storage_dir
        self.defaults = defaults or FilterSet()

    def _read(self, filename: str) -> Any:
        path = self.storage_dir / filename
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            print(f"⚠️  Warning: Could not read {path}: {e}")
            return None

    def _write(self, filename: str, data: Any) -> None:
        path = self.storage_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    def _parse_filters(self, data: Any, label: str) -> Optional[FilterSet]:
        if data is None:
            return None
        try:
            return FilterSet.from_dict(data, self.defaults)
        except ValueError as e:
            print(f"⚠️  Warning: Ignoring malformed {label} filters: {e}")
            return None

    def load(self) -> FilterStoreState:
        """Read stored state; unusable payloads fall back to empty state."""
        state = FilterStoreState()
        state.global_filters = self._parse_filters(self._read(self.GLOBAL_FILE), "global")

        customers = self._read(self.CUSTOMER_FILE)
        if isinstance(customers, dict):
            for customer_id, data in customers.items():
                filters = self._parse_filters(data, f"customer {customer_id}")
                if filters is not None:
                    state.customer_filters[str(customer_id)] = filters
        elif customers is not None:
            print("⚠️  Warning: Ignoring malformed customer filters file")

        modes = self._read(self.MODE_FILE)
        if isinstance(modes, dict):
            for customer_id, mode in modes.items():
                try:
                    state.customer_modes[str(customer_id)] = FilterMode(mode)
                except ValueError:
                    print(f"⚠️  Warning: Unknown filter mode {mode!r} for {customer_id}")
        elif modes is not None:
            print("⚠️  Warning: Ignoring malformed customer modes file")

        return state

    def save(self, state: FilterStoreState) -> None:
        """Write the whole state; global filters are skipped while unset."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        if state.global_filters is not None:
            self._write(self.GLOBAL_FILE, state.global_filters.to_dict())
        self._write(
            self.CUSTOMER_FILE,
            {customer_id: filters.to_dict() for customer_id, filters in state.customer_filters.items()},
        )
        self._write(
            self.MODE_FILE,
            {customer_id: mode.value for customer_id, mode in state.customer_modes.items()},
        )

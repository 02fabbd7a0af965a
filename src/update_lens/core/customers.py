"""Read-only customer and group directory."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from update_lens.core.entities import Customer, CustomerGroup


@dataclass
class CustomerDirectory:
    """Customers and groups known to the account team."""

    customers: list[Customer] = field(default_factory=list)
    groups: list[CustomerGroup] = field(default_factory=list)

    def get(self, customer_id: str) -> Optional[Customer]:
        return next((c for c in self.customers if c.id == customer_id), None)

    def owners(self) -> dict[str, int]:
        """Owner tag -> number of customers it owns."""
        counts: dict[str, int] = {}
        for customer in self.customers:
            if customer.owner:
                counts[customer.owner] = counts.get(customer.owner, 0) + 1
        return counts

    def groups_of(self, customer_id: str) -> list[str]:
        return [group.name for group in self.groups if customer_id in group.customer_ids]

    @classmethod
    def load(cls, path: Path) -> "CustomerDirectory":
        """Load ``customers:`` and ``groups:`` lists from YAML.

        A missing file yields an empty directory.
        """
        if not path.exists():
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        customers = [
            Customer(
                id=str(entry["id"]),
                name=entry.get("name", str(entry["id"])),
                owner=entry.get("owner") or "",
                is_active=entry.get("is_active", True) is not False,
            )
            for entry in data.get("customers", [])
        ]
        groups = [
            CustomerGroup(
                id=str(entry["id"]),
                name=entry.get("name", str(entry["id"])),
                customer_ids=[str(cid) for cid in entry.get("customer_ids", [])],
                description=entry.get("description", ""),
            )
            for entry in data.get("groups", [])
        ]
        return cls(customers=customers, groups=groups)

"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CustomerState:
    customer_id: int | None = None


@dataclass
class OrderState:
    """Tracks a buyer's orders and how many were refused for lack of stock."""

    order_ids: list[int] = field(default_factory=list)
    shortages: int = 0
    conflicts: int = 0


@dataclass
class CatalogueState:
    """Product ids and categories seen while browsing."""

    product_ids: list[int] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

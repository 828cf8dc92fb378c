"""Order placement: the transaction engine followed by product cache eviction.

`OrderTransactionEngine` decrements stock directly in the ledger, so every
product it touched, the all-products list and each touched category must be
evicted from the product cache once the order commits.
"""

from collections.abc import Iterable

from catalogue.product.cached import CachedProductRepository
from ordering.order.creation import OrderTransactionEngine, PlacedOrder
from shared.deadline import Deadline


class OrderPlacement:
    def __init__(self, engine: OrderTransactionEngine, products: CachedProductRepository):
        self._engine = engine
        self._products = products

    def place(self, customer_id: int, items: Iterable, deadline: Deadline | None = None) -> PlacedOrder:
        placed = self._engine.create_order(customer_id, items, deadline=deadline)
        self._products.evict(placed.product_ids, placed.categories)
        return placed


def build_order_placement(database=None) -> OrderPlacement:
    from catalogue.product.cached import build_product_repository
    from shared.database import get_database
    from shared.settings import get_settings

    database = database or get_database()
    engine = OrderTransactionEngine(database, retry_attempts=get_settings().order_retry_attempts)
    return OrderPlacement(engine, build_product_repository(database))

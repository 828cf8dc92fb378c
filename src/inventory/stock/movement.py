"""Stock movements: a quantity change and its audit row, applied together.

Receiving goods, manual adjustments and reservations all change quantity on
hand outside of order placement. Each one runs as a single unit of work that
applies the signed delta in the ledger and appends the Operation Log row; the
product's cache entries are evicted once it commits.
"""

import structlog
from sqlalchemy.exc import IntegrityError

from catalogue.product.cached import CachedProductRepository
from catalogue.product.ledger import apply_stock_delta
from catalogue.product.product import Product
from inventory.operation.log import append_operation
from inventory.operation.operation import Operation, OperationType, StockChange
from shared.database import Database
from shared.deadline import Deadline
from shared.errors import invalid_input

logger = structlog.get_logger(__name__)


def check_direction(operation_type: str, change: int) -> None:
    """Incoming stock adds; outgoing and reserve take away; adjustments go either way."""
    if operation_type == OperationType.INCOMING.value and change <= 0:
        raise invalid_input("change", "Incoming operations must increase stock")
    if operation_type in (OperationType.OUTGOING.value, OperationType.RESERVE.value) and change >= 0:
        raise invalid_input("change", f"{operation_type.capitalize()} operations must decrease stock")


class StockMovements:
    def __init__(self, database: Database, products: CachedProductRepository):
        self._database = database
        self._products = products

    def record(
        self,
        product_id: int,
        change: int,
        operation_type: str,
        order_id: int | None = None,
        deadline: Deadline | None = None,
    ) -> tuple[Product, Operation]:
        movement = StockChange(
            product_id=product_id,
            order_id=order_id,
            change=change,
            operation_type=operation_type,
        )
        check_direction(movement.operation_type, movement.change)

        with self._database.transaction(deadline) as connection:
            product = apply_stock_delta(connection, movement.product_id, movement.change)
            try:
                operation = append_operation(connection, movement)
            except IntegrityError as exc:
                raise invalid_input("order_id", f"Order {movement.order_id} does not exist") from exc

        self._products.evict([product.product_id], [product.category])
        logger.info(
            "Stock movement recorded",
            product_id=product.product_id,
            operation_type=operation.operation_type,
            change=operation.change,
            quantity=product.quantity,
        )
        return product, operation

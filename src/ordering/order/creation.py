"""Order Transaction Engine — the all-or-nothing order creation routine.

One call to `create_order` runs a single unit of work:

    1. the customer must exist
    2. price and quantity for every distinct product are read in one locked lookup
    3. every line is checked against stock before anything is written
    4. the total is computed from ledger prices, never from the request
    5. the order row is inserted with status "created"
    6. per line: the item (with its price snapshot), the stock decrement and
       an "outgoing" Operation Log row linked to the order
    7. commit

Any failure rolls the whole unit back. A decrement that affects no rows while
the product still exists means another writer took the stock first; the unit
is retried from the top, so a genuine shortage surfaces as NotEnoughStock on
the next attempt.

The engine writes straight to the ledger and never touches the product cache;
see `ordering.order.placement` for the eviction that must follow.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError

from catalogue.product.ledger import StockLevel, decrement_stock, lock_stock, product_exists
from identity.customer.repository import customer_exists
from inventory.operation.log import append_operation
from inventory.operation.operation import OperationType, StockChange
from ordering.order.order import Order, OrderItem, OrderLine
from ordering.order.repository import insert_order, insert_order_item
from shared.database import Database
from shared.deadline import Deadline
from shared.errors import (
    NotEnoughStockError,
    StockConflictError,
    invalid_input,
    not_found,
    require_positive_id,
)

logger = structlog.get_logger(__name__)


@dataclass
class PlacedOrder:
    order: Order
    items: list[OrderItem] = field(default_factory=list)
    stock: dict[int, StockLevel] = field(default_factory=dict)

    @property
    def product_ids(self) -> list[int]:
        return sorted(self.stock)

    @property
    def categories(self) -> set[str]:
        return {level.category for level in self.stock.values() if level.category}


def _coerce_line(line) -> OrderLine:
    if isinstance(line, OrderLine):
        return line
    if isinstance(line, Mapping):
        return OrderLine(product_id=line.get("product_id"), quantity=line.get("quantity"))
    return OrderLine(product_id=getattr(line, "product_id", None), quantity=getattr(line, "quantity", None))


def validate_order_request(customer_id: int, items: Iterable) -> list[OrderLine]:
    """Validate the request shape before the store is touched."""
    require_positive_id(customer_id, "customer_id")
    lines = []
    for index, item in enumerate(items or ()):
        try:
            lines.append(_coerce_line(item))
        except ValidationError as exc:
            raise ValidationError(
                {f"items[{index}].{name}": errors for name, errors in exc.messages.items()}
            ) from exc
    if not lines:
        raise invalid_input("items", "Order must contain at least one item")
    return lines


class OrderTransactionEngine:
    def __init__(self, database: Database, retry_attempts: int = 3):
        self._database = database
        self._retry_attempts = max(1, retry_attempts)

    def create_order(self, customer_id: int, items: Iterable, deadline: Deadline | None = None) -> PlacedOrder:
        lines = validate_order_request(customer_id, items)

        for attempt in range(1, self._retry_attempts + 1):
            try:
                placed = self._run(customer_id, lines, deadline)
            except StockConflictError as exc:
                if attempt == self._retry_attempts:
                    logger.error("Order creation failed after retries", customer_id=customer_id, attempts=attempt)
                    raise
                logger.warning(
                    "Stock changed during order creation, retrying",
                    customer_id=customer_id,
                    attempt=attempt,
                    error=str(exc),
                )
                continue

            logger.info(
                "Order created",
                order_id=placed.order.order_id,
                customer_id=customer_id,
                total_amount=str(placed.order.total_amount),
                items=len(placed.items),
            )
            return placed

    def _run(self, customer_id: int, lines: list[OrderLine], deadline: Deadline | None) -> PlacedOrder:
        demand = Counter()
        for line in lines:
            demand[line.product_id] += line.quantity

        with self._database.transaction(deadline) as connection:
            if not customer_exists(connection, customer_id):
                raise not_found("Customer", customer_id)

            stock = lock_stock(connection, demand)
            for product_id in demand:
                if product_id not in stock:
                    raise not_found("Product", product_id)

            for product_id, requested in demand.items():
                available = stock[product_id].quantity
                if requested > available:
                    raise NotEnoughStockError(product_id, available, requested)

            total = sum((stock[line.product_id].price * line.quantity for line in lines), Decimal("0"))
            order = insert_order(connection, customer_id, total)
            _checkpoint(deadline)

            placed = PlacedOrder(order=order, stock=stock)
            for line in lines:
                price = stock[line.product_id].price
                placed.items.append(insert_order_item(connection, order.order_id, line.product_id, line.quantity, price))

                if decrement_stock(connection, line.product_id, line.quantity) == 0:
                    if not product_exists(connection, line.product_id):
                        raise not_found("Product", line.product_id)
                    raise StockConflictError(f"Stock for product {line.product_id} changed during order creation")

                append_operation(
                    connection,
                    StockChange(
                        product_id=line.product_id,
                        order_id=order.order_id,
                        change=-line.quantity,
                        operation_type=OperationType.OUTGOING.value,
                    ),
                )
                _checkpoint(deadline)

        return placed


def _checkpoint(deadline: Deadline | None) -> None:
    if deadline is not None:
        deadline.check()

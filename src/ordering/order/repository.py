"""Order storage: row inserts used by the transaction engine, plus the read side."""

from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection

from ordering.order.order import Order, OrderDetails, OrderItem, OrderStatus
from shared.database import Database, order_items, orders
from shared.deadline import Deadline
from shared.errors import invalid_input, not_found, require_positive_id

logger = structlog.get_logger(__name__)

_ORDER_COLUMNS = (
    orders.c.order_id,
    orders.c.customer_id,
    orders.c.total_amount,
    orders.c.status,
    orders.c.created_at,
)

_ITEM_COLUMNS = (
    order_items.c.order_item_id,
    order_items.c.order_id,
    order_items.c.product_id,
    order_items.c.quantity,
    order_items.c.price,
)


def insert_order(connection: Connection, customer_id: int, total_amount: Decimal) -> Order:
    created_at = datetime.now(UTC)
    result = connection.execute(
        insert(orders).values(
            customer_id=customer_id,
            total_amount=total_amount,
            status=OrderStatus.CREATED.value,
            created_at=created_at,
        )
    )
    return Order(
        order_id=result.inserted_primary_key[0],
        customer_id=customer_id,
        total_amount=total_amount,
        status=OrderStatus.CREATED.value,
        created_at=created_at,
    )


def insert_order_item(connection: Connection, order_id: int, product_id: int, quantity: int, price: Decimal) -> OrderItem:
    result = connection.execute(
        insert(order_items).values(order_id=order_id, product_id=product_id, quantity=quantity, price=price)
    )
    return OrderItem(
        order_item_id=result.inserted_primary_key[0],
        order_id=order_id,
        product_id=product_id,
        quantity=quantity,
        price=price,
    )


def _to_order(row) -> Order:
    return Order(**row._mapping)


def _to_item(row) -> OrderItem:
    return OrderItem.model_validate(dict(row._mapping))


def validate_status(status: str) -> str:
    if not status:
        raise invalid_input("status", "Status cannot be empty")
    allowed = [s.value for s in OrderStatus]
    if status not in allowed:
        raise invalid_input("status", f"Invalid status '{status}', expected one of: {', '.join(allowed)}")
    return status


class OrderRepository:
    """Read access to orders and the status transition.

    Orders are only ever created through `OrderTransactionEngine`.
    """

    def __init__(self, database: Database):
        self._database = database

    def get_by_id(self, order_id: int, deadline: Deadline | None = None) -> Order:
        require_positive_id(order_id, "order_id")
        with self._database.transaction(deadline) as connection:
            row = connection.execute(select(*_ORDER_COLUMNS).where(orders.c.order_id == order_id)).first()
        if row is None:
            raise not_found("Order", order_id)
        return _to_order(row)

    def get_all(self, deadline: Deadline | None = None) -> list[Order]:
        with self._database.transaction(deadline) as connection:
            rows = connection.execute(select(*_ORDER_COLUMNS).order_by(orders.c.order_id))
            return [_to_order(row) for row in rows]

    def get_by_customer_id(self, customer_id: int, deadline: Deadline | None = None) -> list[Order]:
        require_positive_id(customer_id, "customer_id")
        with self._database.transaction(deadline) as connection:
            rows = connection.execute(
                select(*_ORDER_COLUMNS).where(orders.c.customer_id == customer_id).order_by(orders.c.order_id)
            )
            return [_to_order(row) for row in rows]

    def get_with_items(self, order_id: int, deadline: Deadline | None = None) -> OrderDetails:
        require_positive_id(order_id, "order_id")
        with self._database.transaction(deadline) as connection:
            row = connection.execute(select(*_ORDER_COLUMNS).where(orders.c.order_id == order_id)).first()
            if row is None:
                raise not_found("Order", order_id)
            items = connection.execute(
                select(*_ITEM_COLUMNS)
                .where(order_items.c.order_id == order_id)
                .order_by(order_items.c.order_item_id)
            )
            return OrderDetails(order=_to_order(row), items=[_to_item(item) for item in items])

    def update_status(self, order_id: int, status: str, deadline: Deadline | None = None) -> Order:
        require_positive_id(order_id, "order_id")
        validate_status(status)
        with self._database.transaction(deadline) as connection:
            result = connection.execute(update(orders).where(orders.c.order_id == order_id).values(status=status))
            if result.rowcount == 0:
                raise not_found("Order", order_id)
            row = connection.execute(select(*_ORDER_COLUMNS).where(orders.c.order_id == order_id)).one()

        logger.info("Order status updated", order_id=order_id, status=status)
        return _to_order(row)

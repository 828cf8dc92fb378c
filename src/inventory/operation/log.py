"""Operation Log — append-only audit trail of stock movements.

`append_operation` writes on a caller's connection so the row commits or rolls
back together with the stock change it records.
"""

from datetime import UTC, datetime

import structlog
from sqlalchemy import insert, select
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from inventory.operation.operation import Operation, StockChange
from shared.database import Database, operations
from shared.deadline import Deadline
from shared.errors import invalid_input, require_positive_id

logger = structlog.get_logger(__name__)

_OPERATION_COLUMNS = (
    operations.c.operation_id,
    operations.c.product_id,
    operations.c.order_id,
    operations.c.operation_type,
    operations.c.change_quant.label("change"),
    operations.c.created_at,
)


def _to_operation(row) -> Operation:
    return Operation.model_validate(dict(row._mapping))


def append_operation(connection: Connection, change: StockChange) -> Operation:
    created_at = datetime.now(UTC)
    result = connection.execute(
        insert(operations).values(
            product_id=change.product_id,
            order_id=change.order_id,
            operation_type=change.operation_type,
            change_quant=change.change,
            created_at=created_at,
        )
    )
    return Operation(
        operation_id=result.inserted_primary_key[0],
        product_id=change.product_id,
        order_id=change.order_id,
        operation_type=change.operation_type,
        change=change.change,
        created_at=created_at,
    )


class OperationLog:
    def __init__(self, database: Database):
        self._database = database

    def create(self, change: StockChange, deadline: Deadline | None = None) -> Operation:
        """Append a standalone audit row. The product (and order, if given) must exist."""
        with self._database.transaction(deadline) as connection:
            try:
                operation = append_operation(connection, change)
            except IntegrityError as exc:
                raise invalid_input("product_id", "Operation references a missing product or order") from exc

        logger.info(
            "Operation recorded",
            operation_id=operation.operation_id,
            product_id=operation.product_id,
            operation_type=operation.operation_type,
            change=operation.change,
        )
        return operation

    def get_by_product_id(self, product_id: int, deadline: Deadline | None = None) -> list[Operation]:
        require_positive_id(product_id, "product_id")
        return self._select(operations.c.product_id == product_id, deadline)

    def get_by_order_id(self, order_id: int, deadline: Deadline | None = None) -> list[Operation]:
        require_positive_id(order_id, "order_id")
        return self._select(operations.c.order_id == order_id, deadline)

    def _select(self, criterion, deadline: Deadline | None) -> list[Operation]:
        with self._database.transaction(deadline) as connection:
            rows = connection.execute(
                select(*_OPERATION_COLUMNS).where(criterion).order_by(operations.c.operation_id)
            )
            return [_to_operation(row) for row in rows]

"""Stock Ledger — authoritative storage for product rows.

Besides the `ProductRepository` methods, this module exposes the
connection-level functions that other contexts compose inside their own
units of work (the order transaction and stock movements):

    lock_stock         batch price/quantity lookup, row-locked where supported
    decrement_stock    conditional decrement, returns rows affected
    apply_stock_delta  signed delta, applied server-side and verified
    product_exists     point existence check
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from catalogue.product.product import Product, ProductRepository, require_category, validate_product
from inventory.operation.log import append_operation
from inventory.operation.operation import OperationType, StockChange
from shared.database import Database, products
from shared.deadline import Deadline
from shared.errors import (
    NotEnoughStockError,
    StockConflictError,
    invalid_input,
    not_found,
    require_positive_id,
)

logger = structlog.get_logger(__name__)

_PRODUCT_COLUMNS = (
    products.c.product_id,
    products.c.name,
    products.c.price,
    products.c.description,
    products.c.quantity,
    products.c.category,
    products.c.created_at,
    products.c.updated_at,
)


@dataclass(frozen=True)
class StockLevel:
    """Price and quantity of one product as read inside a unit of work."""

    product_id: int
    price: Decimal
    quantity: int
    category: str | None


def _to_product(row) -> Product:
    return Product.model_validate(dict(row._mapping))


def fetch_product(connection: Connection, product_id: int, for_update: bool = False) -> Product:
    """Read one product row; `for_update` holds its row lock until the unit of work ends."""
    stmt = select(*_PRODUCT_COLUMNS).where(products.c.product_id == product_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = connection.execute(stmt).first()
    if row is None:
        raise not_found("Product", product_id)
    return _to_product(row)


def product_exists(connection: Connection, product_id: int) -> bool:
    stmt = select(products.c.product_id).where(products.c.product_id == product_id)
    return connection.execute(stmt).first() is not None


def lock_stock(connection: Connection, product_ids: Iterable[int]) -> dict[int, StockLevel]:
    """Read price and quantity for a set of products in one round-trip.

    Rows are locked in ascending id order (FOR UPDATE on backends that
    support it) so two orders over the same products cannot deadlock.
    Ids absent from the store are simply absent from the result.
    """
    ids = sorted(set(product_ids))
    stmt = (
        select(products.c.product_id, products.c.price, products.c.quantity, products.c.category)
        .where(products.c.product_id.in_(ids))
        .order_by(products.c.product_id)
        .with_for_update()
    )
    return {
        row.product_id: StockLevel(
            product_id=row.product_id,
            price=Decimal(row.price),
            quantity=row.quantity,
            category=row.category,
        )
        for row in connection.execute(stmt)
    }


def decrement_stock(connection: Connection, product_id: int, quantity: int) -> int:
    """Take `quantity` units off a product only if that many are on hand."""
    stmt = (
        update(products)
        .where(products.c.product_id == product_id, products.c.quantity >= quantity)
        .values(quantity=products.c.quantity - quantity, updated_at=datetime.now(UTC))
    )
    return connection.execute(stmt).rowcount


def apply_stock_delta(connection: Connection, product_id: int, change: int) -> Product:
    """Apply a signed delta to quantity on hand and return the updated row.

    The pre-read locks the row, so no other writer can move the quantity
    before this unit of work ends. The delta is applied by the store
    (`quantity = quantity + change`), never by re-sending a computed value.
    The row is re-read afterwards and must differ from the pre-read by exactly
    `change`; anything else aborts the unit of work.
    """
    current = fetch_product(connection, product_id, for_update=True)
    expected = current.quantity + change
    if expected < 0:
        raise NotEnoughStockError(product_id, current.quantity, -change)

    result = connection.execute(
        update(products)
        .where(products.c.product_id == product_id, products.c.quantity + change >= 0)
        .values(quantity=products.c.quantity + change, updated_at=datetime.now(UTC))
    )
    if result.rowcount == 0:
        if not product_exists(connection, product_id):
            raise not_found("Product", product_id)
        raise StockConflictError(f"Stock for product {product_id} changed during the update")

    updated = fetch_product(connection, product_id)
    if updated.quantity != expected:
        raise StockConflictError(
            f"Quantity mismatch after update of product {product_id}: expected {expected}, got {updated.quantity}"
        )
    return updated


def record_adjustment(connection: Connection, product_id: int, change: int) -> None:
    """Log a direct quantity edit as an "adjustment" operation; no-op for zero."""
    if change:
        append_operation(
            connection,
            StockChange(product_id=product_id, change=change, operation_type=OperationType.ADJUSTMENT.value),
        )


def _translate_integrity_error(exc: IntegrityError, product_id) -> Exception:
    message = str(exc.orig).lower()
    if "foreign key" in message:
        return invalid_input("product_id", f"Product {product_id} is referenced by existing orders or operations")
    return invalid_input("product", "Product violates a storage constraint")


class StockLedger(ProductRepository):
    """`ProductRepository` backed directly by the relational store."""

    def __init__(self, database: Database):
        self._database = database

    def get_by_id(self, product_id: int, deadline: Deadline | None = None) -> Product:
        require_positive_id(product_id, "product_id")
        with self._database.transaction(deadline) as connection:
            return fetch_product(connection, product_id)

    def get_all(self, deadline: Deadline | None = None) -> list[Product]:
        with self._database.transaction(deadline) as connection:
            rows = connection.execute(select(*_PRODUCT_COLUMNS).order_by(products.c.product_id))
            return [_to_product(row) for row in rows]

    def get_by_category(self, category: str, deadline: Deadline | None = None) -> list[Product]:
        require_category(category)
        with self._database.transaction(deadline) as connection:
            rows = connection.execute(
                select(*_PRODUCT_COLUMNS).where(products.c.category == category).order_by(products.c.product_id)
            )
            return [_to_product(row) for row in rows]

    def create(self, product: Product, deadline: Deadline | None = None) -> Product:
        validate_product(product)
        now = datetime.now(UTC)
        values = {
            "name": product.name,
            "price": product.price,
            "description": product.description or "",
            "quantity": product.quantity,
            "category": product.category or None,
            "created_at": now,
            "updated_at": now,
        }
        with self._database.transaction(deadline) as connection:
            try:
                result = connection.execute(insert(products).values(**values))
            except IntegrityError as exc:
                raise _translate_integrity_error(exc, None) from exc
            product_id = result.inserted_primary_key[0]

        logger.info("Product created", product_id=product_id, category=values["category"])
        return Product(product_id=product_id, **values)

    def update(self, product: Product, deadline: Deadline | None = None) -> Product:
        require_positive_id(product.product_id, "product_id")
        validate_product(product)
        with self._database.transaction(deadline) as connection:
            previous = fetch_product(connection, product.product_id, for_update=True)
            try:
                connection.execute(
                    update(products)
                    .where(products.c.product_id == product.product_id)
                    .values(
                        name=product.name,
                        price=product.price,
                        description=product.description or "",
                        quantity=product.quantity,
                        category=product.category or None,
                        updated_at=datetime.now(UTC),
                    )
                )
            except IntegrityError as exc:
                raise _translate_integrity_error(exc, product.product_id) from exc
            record_adjustment(connection, product.product_id, product.quantity - previous.quantity)
            return fetch_product(connection, product.product_id)

    def delete(self, product_id: int, deadline: Deadline | None = None) -> None:
        require_positive_id(product_id, "product_id")
        with self._database.transaction(deadline) as connection:
            try:
                result = connection.execute(delete(products).where(products.c.product_id == product_id))
            except IntegrityError as exc:
                raise _translate_integrity_error(exc, product_id) from exc
            if result.rowcount == 0:
                raise not_found("Product", product_id)
        logger.info("Product deleted", product_id=product_id)

    def update_quantity(self, product_id: int, change: int, deadline: Deadline | None = None) -> Product:
        require_positive_id(product_id, "product_id")
        with self._database.transaction(deadline) as connection:
            updated = apply_stock_delta(connection, product_id, change)
            record_adjustment(connection, product_id, change)
            return updated

"""Relational schema and the unit-of-work wrapper around the SQLAlchemy engine."""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError

from shared.deadline import Deadline
from shared.errors import StorageError
from shared.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

ORDER_STATUSES = ("created", "paid", "cancelled", "shipped")
OPERATION_TYPES = ("incoming", "outgoing", "adjustment", "reserve")

metadata = MetaData()

customers = Table(
    "customers",
    metadata,
    Column("customer_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(150), nullable=False),
    Column("phone_number", String(16), nullable=False),
    Column("address", Text, nullable=False, default=""),
    Column("email", String(254), nullable=False),
    Column("registered_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("email", name="customers_email_key"),
    UniqueConstraint("phone_number", name="customers_phone_number_key"),
)

products = Table(
    "products",
    metadata,
    Column("product_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("quantity", Integer, nullable=False, default=0),
    Column("category", String(100), nullable=True, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("quantity >= 0", name="products_quantity_non_negative"),
    CheckConstraint("price > 0", name="products_price_positive"),
)

orders = Table(
    "orders",
    metadata,
    Column("order_id", Integer, primary_key=True, autoincrement=True),
    Column("customer_id", Integer, ForeignKey("customers.customer_id"), nullable=False, index=True),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column("status", String(20), nullable=False, default="created"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(
        "status IN ({})".format(", ".join(f"'{s}'" for s in ORDER_STATUSES)),
        name="orders_status_valid",
    ),
)

order_items = Table(
    "order_items",
    metadata,
    Column("order_item_id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("product_id", Integer, ForeignKey("products.product_id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    CheckConstraint("quantity > 0", name="order_items_quantity_positive"),
)

operations = Table(
    "operations",
    metadata,
    Column("operation_id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.product_id"), nullable=False, index=True),
    Column("order_id", Integer, ForeignKey("orders.order_id"), nullable=True, index=True),
    Column("operation_type", String(20), nullable=False),
    Column("change_quant", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("change_quant <> 0", name="operations_change_non_zero"),
    CheckConstraint(
        "operation_type IN ({})".format(", ".join(f"'{t}'" for t in OPERATION_TYPES)),
        name="operations_type_valid",
    ),
)


def _configure_sqlite_connection(dbapi_connection, _connection_record):
    # no implicit deferred BEGIN from pysqlite
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_immediate(connection):
    # write lock held from the first statement of the unit of work
    connection.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(settings: Settings) -> Engine:
    """Create an engine with bounded connect, statement and pool timeouts."""
    url = settings.database_url
    options: dict = {"pool_pre_ping": True}

    if url.startswith("sqlite"):
        options["connect_args"] = {"timeout": settings.db_connect_timeout, "check_same_thread": False}
        engine = create_engine(url, **options)
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_immediate)
        return engine

    if settings.db_isolation_level:
        options["isolation_level"] = settings.db_isolation_level

    if url.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": int(settings.db_connect_timeout),
            "options": f"-c statement_timeout={int(settings.db_statement_timeout * 1000)}",
        }
    options["pool_size"] = settings.db_pool_size
    options["pool_timeout"] = settings.db_pool_timeout
    return create_engine(url, **options)


class Database:
    """Shared, pooled access to the transactional store."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Database":
        return cls(build_engine(settings or get_settings()))

    @property
    def is_postgres(self) -> bool:
        return self.engine.dialect.name == "postgresql"

    @contextmanager
    def transaction(self, deadline: Deadline | None = None) -> Iterator[Connection]:
        """Open an atomic unit of work.

        Commits when the block exits cleanly and rolls back on any exception,
        including a deadline that expires before commit. Driver errors that no
        repository translated are re-raised as `StorageError`.
        """
        if deadline is not None:
            deadline.check()
        try:
            with self.engine.begin() as connection:
                if deadline is not None and self.is_postgres:
                    remaining = deadline.remaining()
                    if remaining is not None:
                        connection.exec_driver_sql(f"SET LOCAL statement_timeout = {max(1, int(remaining * 1000))}")
                yield connection
                if deadline is not None:
                    deadline.check()
        except DBAPIError as exc:
            logger.error("Storage failure", error=str(exc.orig))
            raise StorageError("The data store failed to complete the operation") from exc

    def create_all(self) -> None:
        metadata.create_all(self.engine)

    def drop_all(self) -> None:
        metadata.drop_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


_current_database: Database | None = None


def get_database() -> Database:
    """Return the process-wide database. Built from settings on first use."""
    global _current_database
    if _current_database is None:
        _current_database = Database.from_settings()
    return _current_database


def set_database(database: Database) -> None:
    """Override the active database (useful for tests)."""
    global _current_database
    _current_database = database


def reset_database() -> None:
    global _current_database
    if _current_database is not None:
        _current_database.dispose()
    _current_database = None

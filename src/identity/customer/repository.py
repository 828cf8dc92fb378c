"""Customer storage — CRUD plus lookups by the two unique keys."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from identity.customer.customer import Customer
from shared.database import Database, customers
from shared.deadline import Deadline
from shared.errors import DuplicateError, invalid_input, not_found, require_positive_id

logger = structlog.get_logger(__name__)

_CUSTOMER_COLUMNS = (
    customers.c.customer_id,
    customers.c.name,
    customers.c.email,
    customers.c.phone_number,
    customers.c.address,
    customers.c.registered_at,
)


def _to_customer(row) -> Customer:
    return Customer(**row._mapping)


def customer_exists(connection: Connection, customer_id: int) -> bool:
    stmt = select(customers.c.customer_id).where(customers.c.customer_id == customer_id)
    return connection.execute(stmt).first() is not None


def _translate_integrity_error(exc: IntegrityError) -> Exception:
    """Map unique-constraint violations onto DuplicateError.

    PostgreSQL reports the constraint name (customers_email_key), SQLite the
    column (customers.email); both contain the field name.
    """
    message = str(exc.orig).lower()
    if "email" in message:
        return DuplicateError("A customer with this email already exists")
    if "phone" in message:
        return DuplicateError("A customer with this phone_number already exists")
    if "foreign key" in message:
        return invalid_input("customer_id", "Customer has orders and cannot be deleted")
    return invalid_input("customer", "Customer violates a storage constraint")


class CustomerRepository:
    def __init__(self, database: Database):
        self._database = database

    def create(self, customer: Customer, deadline: Deadline | None = None) -> Customer:
        values = {
            "name": customer.name.strip(),
            "email": customer.email,
            "phone_number": customer.phone_number,
            "address": customer.address or "",
            "registered_at": datetime.now(UTC),
        }
        with self._database.transaction(deadline) as connection:
            try:
                result = connection.execute(insert(customers).values(**values))
            except IntegrityError as exc:
                raise _translate_integrity_error(exc) from exc
            customer_id = result.inserted_primary_key[0]

        logger.info("Customer registered", customer_id=customer_id)
        return Customer(customer_id=customer_id, **values)

    def get_by_id(self, customer_id: int, deadline: Deadline | None = None) -> Customer:
        require_positive_id(customer_id, "customer_id")
        return self._get_one(customers.c.customer_id == customer_id, customer_id, deadline)

    def get_by_email(self, email: str, deadline: Deadline | None = None) -> Customer:
        if not email:
            raise invalid_input("email", "Email cannot be empty")
        return self._get_one(customers.c.email == email, email, deadline)

    def get_by_phone_number(self, phone_number: str, deadline: Deadline | None = None) -> Customer:
        if not phone_number:
            raise invalid_input("phone_number", "Phone number cannot be empty")
        return self._get_one(customers.c.phone_number == phone_number, phone_number, deadline)

    def _get_one(self, criterion, identifier, deadline: Deadline | None) -> Customer:
        with self._database.transaction(deadline) as connection:
            row = connection.execute(select(*_CUSTOMER_COLUMNS).where(criterion)).first()
        if row is None:
            raise not_found("Customer", identifier)
        return _to_customer(row)

    def get_all(self, deadline: Deadline | None = None) -> list[Customer]:
        with self._database.transaction(deadline) as connection:
            rows = connection.execute(select(*_CUSTOMER_COLUMNS).order_by(customers.c.customer_id))
            return [_to_customer(row) for row in rows]

    def update(self, customer: Customer, deadline: Deadline | None = None) -> Customer:
        require_positive_id(customer.customer_id, "customer_id")
        with self._database.transaction(deadline) as connection:
            try:
                result = connection.execute(
                    update(customers)
                    .where(customers.c.customer_id == customer.customer_id)
                    .values(
                        name=customer.name.strip(),
                        email=customer.email,
                        phone_number=customer.phone_number,
                        address=customer.address or "",
                    )
                )
            except IntegrityError as exc:
                raise _translate_integrity_error(exc) from exc
            if result.rowcount == 0:
                raise not_found("Customer", customer.customer_id)
            row = connection.execute(
                select(*_CUSTOMER_COLUMNS).where(customers.c.customer_id == customer.customer_id)
            ).one()
        return _to_customer(row)

    def delete(self, customer_id: int, deadline: Deadline | None = None) -> None:
        require_positive_id(customer_id, "customer_id")
        with self._database.transaction(deadline) as connection:
            try:
                result = connection.execute(delete(customers).where(customers.c.customer_id == customer_id))
            except IntegrityError as exc:
                raise _translate_integrity_error(exc) from exc
            if result.rowcount == 0:
                raise not_found("Customer", customer_id)
        logger.info("Customer deleted", customer_id=customer_id)

"""Error taxonomy shared by every context.

NotFound and InvalidInput reuse Protean's exceptions so that value-object
validation failures and repository failures surface the same way:

    ObjectNotFoundError   referenced entity absent                  -> 404
    ValidationError       constraint violation ({field: [msg]})     -> 400
    NotEnoughStockError   insufficient inventory (a ValidationError) -> 400
    ConflictError         duplicate or concurrent write             -> 409
    anything else         storage / internal                        -> 500
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class ConflictError(Exception):
    """A write conflicts with the current state of the store."""


class DuplicateError(ConflictError):
    """A unique constraint (customer email or phone) was violated."""


class StockConflictError(ConflictError):
    """A stock row changed underneath a running unit of work."""


class NotEnoughStockError(ValidationError):
    """Requested quantity exceeds what is on hand for a product."""

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            {
                "quantity": [
                    f"Insufficient stock for product {product_id}: {available} available, {requested} requested"
                ]
            }
        )


class StorageError(Exception):
    """Unclassified failure of the relational store."""


class OperationCancelled(Exception):
    """The caller's deadline passed or the caller cancelled the operation."""


def invalid_input(field: str, message: str) -> ValidationError:
    return ValidationError({field: [message]})


def not_found(entity: str, identifier) -> ObjectNotFoundError:
    return ObjectNotFoundError(f"{entity} with id {identifier} does not exist")


def require_positive_id(value, field: str = "id") -> None:
    """Reject non-positive or non-integer identifiers before touching storage."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise invalid_input(field, f"{field} must be a positive integer")

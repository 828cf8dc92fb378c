"""Product model and the repository contract shared by the ledger and its cache.

The StockLedger (storage) and the CachedProductRepository (read-through cache)
both implement `ProductRepository`, so callers can be handed either one.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

from protean.exceptions import ValidationError
from pydantic import BaseModel

from shared.deadline import Deadline
from shared.errors import invalid_input


class Product(BaseModel):
    """A product row: identity, price and quantity on hand."""

    product_id: int | None = None
    name: str
    price: Decimal
    description: str = ""
    quantity: int = 0
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def validate_product(product: Product) -> None:
    """Check the full-row invariants: name non-empty, price positive, quantity non-negative."""
    messages: dict[str, list[str]] = {}
    if not product.name or not product.name.strip():
        messages["name"] = ["Product name is required"]
    if product.price is None or product.price <= 0:
        messages["price"] = ["Product price must be positive"]
    if product.quantity is None or product.quantity < 0:
        messages["quantity"] = ["Product quantity cannot be negative"]
    if messages:
        raise ValidationError(messages)


def require_category(category: str) -> None:
    if not category or not category.strip():
        raise invalid_input("category", "Category cannot be empty")


class ProductRepository(ABC):
    """Capability set for product storage."""

    @abstractmethod
    def get_by_id(self, product_id: int, deadline: Deadline | None = None) -> Product:
        """Return one product or raise ObjectNotFoundError."""

    @abstractmethod
    def get_all(self, deadline: Deadline | None = None) -> list[Product]:
        """Return every product ordered by id."""

    @abstractmethod
    def get_by_category(self, category: str, deadline: Deadline | None = None) -> list[Product]:
        """Return the products in a category ordered by id."""

    @abstractmethod
    def create(self, product: Product, deadline: Deadline | None = None) -> Product:
        """Persist a new product and return it with its id and timestamps."""

    @abstractmethod
    def update(self, product: Product, deadline: Deadline | None = None) -> Product:
        """Replace every field of an existing product."""

    @abstractmethod
    def delete(self, product_id: int, deadline: Deadline | None = None) -> None:
        """Remove a product."""

    @abstractmethod
    def update_quantity(self, product_id: int, change: int, deadline: Deadline | None = None) -> Product:
        """Apply a signed delta to quantity on hand."""

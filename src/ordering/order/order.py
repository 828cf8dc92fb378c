"""Order aggregate, its stored items and the OrderLine requested by a caller."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from protean.fields import Auto, DateTime, Integer, String
from protean.fields import Decimal as DecimalField
from pydantic import BaseModel

from ordering.domain import ordering


class OrderStatus(Enum):
    CREATED = "created"
    PAID = "paid"
    CANCELLED = "cancelled"
    SHIPPED = "shipped"


@ordering.value_object
class OrderLine:
    """One requested line: a product and how many units of it.

    The unit price is never part of the request; it is read from the ledger
    when the order is placed.
    """

    product_id = Integer(required=True, min_value=1)
    quantity = Integer(required=True, min_value=1)


@ordering.aggregate
class Order:
    """A placed order. Rows are written only by the order transaction."""

    order_id = Auto(identifier=True, increment=True)
    customer_id = Integer(required=True, min_value=1)
    total_amount = DecimalField(required=True, min_value=0)
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.CREATED.value)
    created_at = DateTime()


class OrderItem(BaseModel):
    order_item_id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal


@dataclass
class OrderDetails:
    order: Order
    items: list[OrderItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"order": self.order.to_dict(), "items": [item.model_dump() for item in self.items]}

"""Operation Log records — one immutable row per stock mutation."""

from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Integer, String
from pydantic import BaseModel

from inventory.domain import inventory


class OperationType(Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    ADJUSTMENT = "adjustment"
    RESERVE = "reserve"


@inventory.value_object
class StockChange:
    """A validated request to record one stock movement.

    `order_id` is optional; when present the movement is linked to that order.
    """

    product_id = Integer(required=True, min_value=1)
    order_id = Integer(min_value=1)
    change = Integer(required=True)
    operation_type = String(required=True, max_length=20, choices=OperationType)

    @invariant.post
    def change_must_not_be_zero(self):
        if self.change == 0:
            raise ValidationError({"change": ["Quantity change cannot be zero"]})


class Operation(BaseModel):
    operation_id: int
    product_id: int
    order_id: int | None = None
    operation_type: str
    change: int
    created_at: datetime | None = None

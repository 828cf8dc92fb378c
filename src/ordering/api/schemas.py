"""Pydantic request/response schemas for the Ordering API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# --- Request Schemas ---


class OrderLineRequest(BaseModel):
    product_id: int
    quantity: int


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": 1,
                    "items": [{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 1}],
                }
            ]
        }
    }

    customer_id: int
    items: list[OrderLineRequest] = Field(default_factory=list)


class UpdateStatusRequest(BaseModel):
    status: str


# --- Response Schemas ---


class OrderResponse(BaseModel):
    order_id: int
    customer_id: int
    total_amount: Decimal
    status: str
    created_at: datetime | None = None


class OrderItemResponse(BaseModel):
    order_item_id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal


class OrderDetailsResponse(BaseModel):
    order: OrderResponse
    items: list[OrderItemResponse]

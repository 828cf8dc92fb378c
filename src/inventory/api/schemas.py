"""Pydantic request/response schemas for the Inventory API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class RecordOperationRequest(BaseModel):
    model_config = {
        "json_schema_extra": {"examples": [{"product_id": 1, "operation_type": "incoming", "change": 25}]}
    }

    product_id: int
    operation_type: str
    change: int
    order_id: int | None = None


class OperationResponse(BaseModel):
    operation_id: int
    product_id: int
    order_id: int | None = None
    operation_type: str
    change: int
    created_at: datetime | None = None


class StockMovementResponse(BaseModel):
    """The recorded operation and the product's quantity after it was applied."""

    operation: OperationResponse
    product_id: int
    quantity: int
    price: Decimal

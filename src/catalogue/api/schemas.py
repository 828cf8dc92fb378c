"""Pydantic request/response schemas for the Catalogue API.

These are external contracts — separate from the internal Product model.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ProductRequest(BaseModel):
    name: str
    price: Decimal
    description: str = ""
    quantity: int = 0
    category: str | None = None


class QuantityChangeRequest(BaseModel):
    change: int


class ProductResponse(BaseModel):
    product_id: int
    name: str
    price: Decimal
    description: str
    quantity: int
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StatusResponse(BaseModel):
    status: str = "ok"

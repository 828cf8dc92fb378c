"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

# --- Request Schemas ---


class CustomerRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane.doe@example.com",
                    "phone_number": "+79161234567",
                    "address": "1 Main Street",
                }
            ]
        }
    }

    name: str
    email: str
    phone_number: str
    address: str = ""


# --- Response Schemas ---


class CustomerResponse(BaseModel):
    customer_id: int
    name: str
    email: str
    phone_number: str
    address: str
    registered_at: datetime | None = None


class StatusResponse(BaseModel):
    status: str = "ok"

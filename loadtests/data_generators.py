"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the service's validation rules
(EmailAddress and PhoneNumber value objects, positive prices) and match the
field names expected by the API's Pydantic request schemas.
"""

import random
import uuid
from decimal import Decimal

from faker import Faker

fake = Faker()

CATEGORIES = ["tools", "garden", "kitchen", "books", "toys"]

# ---------- Identity ----------


def valid_email() -> str:
    """Generate emails that pass EmailAddress VO validation.

    Rules: exactly one @, no spaces/tabs, valid domain with dot,
    no leading/trailing dots, no consecutive dots.
    """
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:4]}@{domain}"


def valid_phone() -> str:
    """Generate E.164 numbers: +, country code 1, then ten digits."""
    return f"+1{random.randint(200, 999)}{random.randint(200, 999)}{random.randint(1000, 9999)}"


def customer_data() -> dict:
    return {
        "name": fake.name()[:150],
        "email": valid_email(),
        "phone_number": valid_phone(),
        "address": fake.address().replace("\n", ", "),
    }


# ---------- Catalogue ----------


def product_data(quantity: int | None = None) -> dict:
    price = Decimal(random.randint(100, 50_000)) / 100
    return {
        "name": fake.catch_phrase()[:255],
        "price": str(price),
        "description": fake.sentence(),
        "quantity": random.randint(0, 50) if quantity is None else quantity,
        "category": random.choice(CATEGORIES),
    }


# ---------- Ordering ----------


def order_data(customer_id: int, product_ids: list[int], max_lines: int = 3) -> dict:
    """An order over a random subset of the given (usually contended) products."""
    chosen = random.sample(product_ids, k=min(len(product_ids), random.randint(1, max_lines)))
    return {
        "customer_id": customer_id,
        "items": [{"product_id": product_id, "quantity": random.randint(1, 3)} for product_id in chosen],
    }


# ---------- Inventory ----------


def restock_data(product_id: int) -> dict:
    return {"product_id": product_id, "operation_type": "incoming", "change": random.randint(5, 20)}

"""Inventory bounded context — Stock movements and the Operation Log.

Every change to a product's quantity on hand is recorded as an append-only
operation (incoming, outgoing, adjustment, reserve), optionally linked to
the order that caused it.
"""

import structlog
from protean.domain import Domain

inventory = Domain(name="inventory")

logger = structlog.get_logger(__name__)

"""Catalogue bounded context — Products, the Stock Ledger and the product cache.

Owns product rows (price and quantity on hand) and the read-through,
write-invalidate cache that fronts product reads.
"""

import structlog
from protean.domain import Domain

catalogue = Domain(name="catalogue")

logger = structlog.get_logger(__name__)

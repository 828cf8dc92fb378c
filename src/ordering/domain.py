"""Ordering bounded context — Orders and the order-creation transaction.

Validates multi-item orders against live stock, prices them from the ledger,
and persists the order, its items, the stock decrements and the matching
operation rows in a single unit of work.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)

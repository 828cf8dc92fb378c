"""Identity bounded context — Customer records.

Handles customer registration data with unique email and E.164 phone number.
"""

import structlog
from protean.domain import Domain

identity = Domain(name="identity")

logger = structlog.get_logger(__name__)

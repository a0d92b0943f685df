"""Ordering bounded context — Orders, Shopping Carts and the Inventory Ledger.

Handles the order lifecycle (Pending through Delivered or Cancelled), cart
management, the conditional stock ledger that checkout reserves against,
one-time-code gated verification, and delivery agent assignment.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)

"""
Warranty released domain event.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass
class WarrantyReleased:
    """Event raised when a warranty hold is paid out to the technician."""

    event_name = "warranty.released"

    job_id: UUID
    technician_id: UUID
    amount: Decimal
    released_at: datetime

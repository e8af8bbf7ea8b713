"""
Job assigned domain event.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID


@dataclass
class JobAssigned:
    """Event raised when a technician wins a job."""

    event_name = "job.assigned"

    job_id: UUID
    technician_id: UUID
    status: str
    agreed_price: Optional[Decimal]
    assigned_at: datetime
    bid_id: Optional[UUID] = None

"""
Job posted domain event.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID


@dataclass
class JobPosted:
    """Event raised when a dealer posts a new job."""

    event_name = "job.posted"

    job_id: UUID
    dealer_id: UUID
    job_number: str
    amount: Optional[Decimal]
    city: str
    posted_at: datetime

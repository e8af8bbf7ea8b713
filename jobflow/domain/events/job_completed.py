"""
Job completed domain event.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass
class JobCompleted:
    """Event raised when the dealer approves a job's completion."""

    event_name = "job.completed"

    job_id: UUID
    technician_id: UUID
    total_amount: Decimal
    immediate_release: Decimal
    warranty_hold: Decimal
    completed_at: datetime

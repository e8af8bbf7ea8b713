"""
Job status value object.
"""

from enum import Enum


class JobStatus(str, Enum):
    """Job lifecycle status enumeration."""

    PENDING = "PENDING"
    WAITING_FOR_PAYMENT = "WAITING_FOR_PAYMENT"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETION_PENDING_APPROVAL = "COMPLETION_PENDING_APPROVAL"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def is_terminal(self) -> bool:
        """Check if status is final (no more transitions)."""
        return self in [self.COMPLETED, self.CANCELLED]

    def requires_assignee(self) -> bool:
        """Check if a job in this status must have an assigned technician."""
        return self not in [self.PENDING, self.CANCELLED]

    def is_open_for_bids(self) -> bool:
        """Check if technicians may bid on or accept the job."""
        return self == self.PENDING

    def is_cancellable(self) -> bool:
        """Check if the dealer may still cancel the job."""
        return self in [self.PENDING, self.WAITING_FOR_PAYMENT, self.ASSIGNED]

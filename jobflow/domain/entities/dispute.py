"""
Dispute domain entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from jobflow.domain.exceptions.workflow_error import InvalidStateError
from jobflow.domain.value_objects.dispute_status import DisputeStatus


@dataclass
class Dispute:
    """Complaint raised against a completed job."""

    job_id: UUID
    raised_by: UUID
    reason: str
    id: UUID = field(default_factory=uuid4)
    status: DisputeStatus = DisputeStatus.OPEN
    resolved_by: Optional[UUID] = None
    resolution_note: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.reason or not self.reason.strip():
            raise ValueError("Dispute reason is required")
        self.status = DisputeStatus(self.status)
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)

    @property
    def is_open(self) -> bool:
        return self.status.is_open()

    def resolve(
        self,
        outcome: DisputeStatus,
        resolved_by: UUID,
        note: Optional[str] = None,
    ) -> None:
        outcome = DisputeStatus(outcome)
        if outcome.is_open():
            raise ValueError("Resolution outcome must close the dispute")
        if not self.is_open:
            raise InvalidStateError(
                f"Dispute {self.id} is already {self.status.value}",
                current_status=self.status.value,
            )
        self.status = outcome
        self.resolved_by = resolved_by
        self.resolution_note = note
        self.resolved_at = datetime.now(timezone.utc)

"""
Warranty hold domain entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from jobflow.domain.exceptions.workflow_error import InvalidStateError
from jobflow.domain.value_objects.warranty_hold_status import WarrantyHoldStatus


@dataclass
class WarrantyHold:
    """Part of a technician's payout kept back until the warranty expires.

    While a dispute is open the hold is FROZEN and its clock stops; the time
    spent frozen is added to ``effective_release_at`` when it is unfrozen.
    """

    job_id: UUID
    technician_id: UUID
    amount: Decimal
    warranty_days: int
    starts_at: datetime
    id: UUID = field(default_factory=uuid4)
    status: WarrantyHoldStatus = WarrantyHoldStatus.LOCKED
    release_due_at: Optional[datetime] = None
    effective_release_at: Optional[datetime] = None
    frozen_at: Optional[datetime] = None
    paused_seconds: int = 0
    released_at: Optional[datetime] = None
    forfeited_at: Optional[datetime] = None
    release_attempts: int = 0
    last_deferred_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.warranty_days < 0:
            raise ValueError("Warranty days must be non-negative")
        if self.amount < 0:
            raise ValueError("Hold amount cannot be negative")

        self.status = WarrantyHoldStatus(self.status)
        if self.release_due_at is None:
            self.release_due_at = self.starts_at + timedelta(days=self.warranty_days)
        if self.effective_release_at is None:
            self.effective_release_at = self.release_due_at + timedelta(
                seconds=self.paused_seconds
            )

        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = datetime.now(timezone.utc)

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def is_due(self, now: datetime) -> bool:
        return self.status == WarrantyHoldStatus.LOCKED and now >= self.effective_release_at

    def freeze(self, now: datetime) -> bool:
        """Stop the release clock. Returns ``False`` if already frozen."""
        if self.status == WarrantyHoldStatus.FROZEN:
            return False
        if self.status != WarrantyHoldStatus.LOCKED:
            raise InvalidStateError(
                f"Cannot freeze warranty hold in {self.status.value} state",
                current_status=self.status.value,
            )
        self.status = WarrantyHoldStatus.FROZEN
        self.frozen_at = now
        self._touch()
        return True

    def unfreeze(self, now: datetime) -> bool:
        """Restart the clock, pushing the release date out by the frozen time."""
        if self.status != WarrantyHoldStatus.FROZEN:
            return False

        paused = max(int((now - self.frozen_at).total_seconds()), 0)
        self.paused_seconds += paused
        self.effective_release_at = self.release_due_at + timedelta(
            seconds=self.paused_seconds
        )
        self.status = WarrantyHoldStatus.LOCKED
        self.frozen_at = None
        self._touch()
        return True

    def record_deferral(self, reason: str) -> None:
        self.release_attempts += 1
        self.last_deferred_reason = reason
        self._touch()

    def release(self, now: datetime) -> None:
        if self.status != WarrantyHoldStatus.LOCKED:
            raise InvalidStateError(
                f"Cannot release warranty hold in {self.status.value} state",
                current_status=self.status.value,
            )
        self.status = WarrantyHoldStatus.RELEASED
        self.released_at = now
        self.last_deferred_reason = None
        self._touch()

    def forfeit(self, now: datetime) -> None:
        """Return the held money to the dealer."""
        if self.status.is_final():
            raise InvalidStateError(
                f"Cannot forfeit warranty hold in {self.status.value} state",
                current_status=self.status.value,
            )
        self.status = WarrantyHoldStatus.FORFEITED
        self.forfeited_at = now
        self.frozen_at = None
        self._touch()

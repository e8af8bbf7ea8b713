"""Job domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from jobflow.domain.exceptions.workflow_error import ForbiddenError, InvalidStateError
from jobflow.domain.state_machine import ensure_operation_allowed, ensure_transition
from jobflow.domain.value_objects.customer_contact import CustomerContact
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.location import JobLocation


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class Job:
    """Job domain entity.

    A dealer-posted unit of work. Status changes only happen through the
    methods below, each of which is checked against the job state machine.
    """

    title: str
    description: str
    dealer_id: UUID
    location: JobLocation
    customer: Optional[CustomerContact] = None
    work_details: Optional[str] = None
    amount: Optional[Decimal] = None
    warranty_days: Optional[int] = None
    id: UUID = field(default_factory=uuid4)
    job_number: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    assigned_technician_id: Optional[UUID] = None
    payment_locked: bool = False
    final_price: Optional[Decimal] = None
    negotiation_rounds: int = 0
    payment_order_id: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_due_at: Optional[datetime] = None
    assigned_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completion_submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate job data."""
        if not self.title or not self.title.strip():
            raise ValueError("Job title is required")
        if not self.location:
            raise ValueError("Job location is required")

        self.status = JobStatus(self.status)
        self.amount = _to_decimal(self.amount)
        self.final_price = _to_decimal(self.final_price)

        if self.amount is not None and self.amount < 0:
            raise ValueError("Job amount cannot be negative")
        if self.warranty_days is not None and self.warranty_days < 0:
            raise ValueError("Warranty days must be non-negative")

        # Set timestamps if not provided
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = datetime.now(timezone.utc)
        if not self.job_number:
            self.job_number = (
                f"JOB-{self.created_at:%Y%m%d}-{self.id.hex[:6].upper()}"
            )

    @property
    def agreed_price(self) -> Optional[Decimal]:
        """Price the technician will be paid: negotiated price, else posted amount."""
        return self.final_price if self.final_price is not None else self.amount

    @property
    def requires_payment(self) -> bool:
        """Check if funds must be captured before work starts."""
        price = self.agreed_price
        return price is not None and price > 0

    def has_consistent_assignment(self) -> bool:
        """Check the assignee/status invariant."""
        return (self.assigned_technician_id is not None) == (
            self.status.requires_assignee()
        )

    def is_assigned_to(self, technician_id: UUID) -> bool:
        return self.assigned_technician_id == technician_id

    def _transition(self, target: JobStatus) -> None:
        ensure_transition(self.status, target)
        self.status = target
        self.updated_at = datetime.now(timezone.utc)

    def _ensure_assignee(self, technician_id: UUID, action: str) -> None:
        if not self.is_assigned_to(technician_id):
            raise ForbiddenError(f"Only the assigned technician can {action} this job")

    def assign_direct(
        self,
        technician_id: UUID,
        payment_due_at: Optional[datetime] = None,
    ) -> None:
        """Assign the job at its posted price.

        Priced jobs wait for the dealer's payment before work can start.
        """
        ensure_operation_allowed(self.status, "accept")

        now = datetime.now(timezone.utc)
        self.assigned_technician_id = technician_id
        self.assigned_at = now
        self.final_price = self.amount

        if self.requires_payment:
            self.payment_due_at = payment_due_at
            self._transition(JobStatus.WAITING_FOR_PAYMENT)
        else:
            self._transition(JobStatus.ASSIGNED)

    def assign_negotiated(
        self, technician_id: UUID, price: Decimal, round_number: int
    ) -> None:
        """Assign the job at a price agreed through bidding."""
        ensure_operation_allowed(self.status, "accept_bid")

        self.assigned_technician_id = technician_id
        self.assigned_at = datetime.now(timezone.utc)
        self.final_price = _to_decimal(price)
        self.negotiation_rounds = max(self.negotiation_rounds, round_number)
        self._transition(JobStatus.ASSIGNED)

    def record_negotiation_round(self, round_number: int) -> None:
        self.negotiation_rounds = max(self.negotiation_rounds, round_number)
        self.updated_at = datetime.now(timezone.utc)

    def attach_payment_order(self, order_id: str) -> None:
        """Remember the gateway order created for this job."""
        ensure_operation_allowed(self.status, "lock_payment")
        if self.payment_locked:
            raise InvalidStateError(
                "Payment already captured for this job",
                current_status=self.status.value,
            )
        self.payment_order_id = order_id
        self.updated_at = datetime.now(timezone.utc)

    def lock_payment(self, payment_reference: str) -> bool:
        """Record a captured payment.

        Returns ``False`` when the same payment was already recorded so webhook
        retries are harmless.
        """
        if not payment_reference:
            raise ValueError("Payment reference is required")

        if self.payment_locked:
            if self.payment_reference == payment_reference:
                return False
            raise InvalidStateError(
                f"Job {self.job_number} already has captured payment "
                f"{self.payment_reference}",
                current_status=self.status.value,
            )

        ensure_operation_allowed(self.status, "lock_payment")

        self.payment_locked = True
        self.payment_reference = payment_reference
        self.payment_due_at = None
        if self.status == JobStatus.WAITING_FOR_PAYMENT:
            self._transition(JobStatus.ASSIGNED)
        else:
            self.updated_at = datetime.now(timezone.utc)
        return True

    def start(self, technician_id: UUID) -> None:
        """Technician starts work."""
        self._ensure_assignee(technician_id, "start")
        ensure_operation_allowed(self.status, "start")
        if self.requires_payment and not self.payment_locked:
            raise InvalidStateError(
                "Cannot start job before the dealer's payment is captured",
                current_status=self.status.value,
            )

        self.started_at = datetime.now(timezone.utc)
        self._transition(JobStatus.IN_PROGRESS)

    def submit_completion(self, technician_id: UUID) -> None:
        """Technician reports the work as done."""
        self._ensure_assignee(technician_id, "complete")
        ensure_operation_allowed(self.status, "complete")

        self.completion_submitted_at = datetime.now(timezone.utc)
        self._transition(JobStatus.COMPLETION_PENDING_APPROVAL)

    def approve_completion(self, completed_at: Optional[datetime] = None) -> None:
        """Dealer approves the submitted work."""
        ensure_operation_allowed(self.status, "approve")

        self.completed_at = completed_at or datetime.now(timezone.utc)
        self._transition(JobStatus.COMPLETED)

    def reject_completion(self) -> None:
        """Dealer sends the job back to the technician."""
        ensure_operation_allowed(self.status, "reject_completion")

        self.completion_submitted_at = None
        self._transition(JobStatus.IN_PROGRESS)

    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel the job before work has started."""
        ensure_operation_allowed(self.status, "cancel")

        self.assigned_technician_id = None
        self.payment_due_at = None
        self.cancelled_at = datetime.now(timezone.utc)
        self.cancellation_reason = reason
        self._transition(JobStatus.CANCELLED)

    def is_payment_overdue(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return (
            self.status == JobStatus.WAITING_FOR_PAYMENT
            and not self.payment_locked
            and self.payment_due_at is not None
            and now >= self.payment_due_at
        )

    def expire_payment(self, now: Optional[datetime] = None) -> bool:
        """Re-open a job whose dealer never paid. Returns ``True`` if re-opened."""
        if not self.is_payment_overdue(now):
            return False

        ensure_operation_allowed(self.status, "expire_payment")
        self.assigned_technician_id = None
        self.assigned_at = None
        self.final_price = None
        self.payment_due_at = None
        self.payment_order_id = None
        self._transition(JobStatus.PENDING)
        return True

"""Staged payment use cases: the 80/20 split and warranty hold release."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID

from jobflow.application.interfaces.repositories import (
    DisputeRepositoryInterface,
    JobRepositoryInterface,
    PaymentRepositoryInterface,
)
from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.use_cases.common import ensure_role, load_job
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.domain.entities.job import Job
from jobflow.domain.entities.payment_release import PaymentRelease
from jobflow.domain.entities.payment_split import PaymentSplit
from jobflow.domain.entities.warranty_hold import WarrantyHold
from jobflow.domain.events.warranty_released import WarrantyReleased
from jobflow.domain.exceptions.workflow_error import (
    ConcurrentModificationError,
    ForbiddenError,
    InvalidStateError,
)
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.warranty_hold_status import (
    PaymentReleaseKind,
    ReleaseOutcome,
    WarrantyHoldStatus,
)
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import record_warranty_release

logger = get_logger(__name__)


class OnJobCompletedUseCase:
    """Computes and persists the payout split for a completed job.

    Runs once per job; later calls return the split already on record.
    """

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        payment_repo: PaymentRepositoryInterface,
        transaction_service: TransactionService,
        immediate_percent: int = settings.IMMEDIATE_RELEASE_PERCENT,
        default_warranty_days: int = settings.DEFAULT_WARRANTY_DAYS,
    ):
        self.job_repo = job_repo
        self.payment_repo = payment_repo
        self.transaction_service = transaction_service
        self.immediate_percent = immediate_percent
        self.default_warranty_days = default_warranty_days

    async def execute(self, job_id: UUID) -> PaymentSplit:
        async def operation() -> PaymentSplit:
            job = await load_job(self.job_repo, job_id)
            return await self.apply(job)

        return await self.transaction_service.execute_in_transaction(operation)

    async def apply(self, job: Job) -> PaymentSplit:
        """Create the split inside the caller's transaction."""
        if job.status != JobStatus.COMPLETED:
            raise InvalidStateError(
                f"Cannot split payment for job in {job.status.value} state. "
                "Job must be COMPLETED.",
                current_status=job.status.value,
            )

        existing = await self.payment_repo.get_split_by_job(job.id)
        if existing:
            return existing

        now = datetime.now(timezone.utc)
        split = PaymentSplit.compute(
            job_id=job.id,
            technician_id=job.assigned_technician_id,
            total_amount=job.agreed_price or Decimal("0"),
            immediate_percent=self.immediate_percent,
        )

        if split.immediate_release > 0:
            split.mark_immediate_released(now)
        split = await self.payment_repo.create_split(split)

        if split.immediate_release > 0:
            await self.payment_repo.create_release(
                PaymentRelease(
                    job_id=job.id,
                    technician_id=split.technician_id,
                    kind=PaymentReleaseKind.IMMEDIATE,
                    amount=split.immediate_release,
                    released_at=now,
                )
            )

        hold = None
        if split.has_hold:
            # Jobs posted without a warranty period get the platform default
            warranty_days = job.warranty_days
            if warranty_days is None:
                warranty_days = self.default_warranty_days
            hold = await self.payment_repo.create_hold(
                WarrantyHold(
                    job_id=job.id,
                    technician_id=split.technician_id,
                    amount=split.warranty_hold,
                    warranty_days=warranty_days,
                    starts_at=job.completed_at or now,
                )
            )

        logger.info(
            "Payment split recorded",
            job_id=str(job.id),
            total_amount=str(split.total_amount),
            immediate_release=str(split.immediate_release),
            warranty_hold=str(split.warranty_hold),
            release_due_at=hold.release_due_at.isoformat() if hold else None,
        )
        return split


@dataclass
class SplitPreview:
    """Split shown to a party, persisted or not."""

    split: PaymentSplit
    persisted: bool
    hold: Optional[WarrantyHold] = None


class GetPaymentSplitUseCase:
    """Returns the recorded split, or a preview for jobs not yet completed."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        payment_repo: PaymentRepositoryInterface,
        immediate_percent: int = settings.IMMEDIATE_RELEASE_PERCENT,
    ):
        self.job_repo = job_repo
        self.payment_repo = payment_repo
        self.immediate_percent = immediate_percent

    async def execute(self, job_id: UUID, actor: Actor) -> SplitPreview:
        job = await load_job(self.job_repo, job_id)
        if not (
            actor.owns(job.dealer_id)
            or (job.assigned_technician_id and actor.owns(job.assigned_technician_id))
            or (actor.is_technician and job.status == JobStatus.PENDING)
        ):
            raise ForbiddenError("Payment split is visible to the job's parties only")

        split = await self.payment_repo.get_split_by_job(job.id)
        if split:
            hold = await self.payment_repo.get_hold_by_job(job.id)
            return SplitPreview(split=split, persisted=True, hold=hold)

        preview = PaymentSplit.compute(
            job_id=job.id,
            technician_id=job.assigned_technician_id or actor.user_id,
            total_amount=job.agreed_price or Decimal("0"),
            immediate_percent=self.immediate_percent,
        )
        return SplitPreview(split=preview, persisted=False)


class ReleaseWarrantyHoldUseCase:
    """Pays out a job's warranty hold once its warranty has run out."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        payment_repo: PaymentRepositoryInterface,
        dispute_repo: DisputeRepositoryInterface,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.payment_repo = payment_repo
        self.dispute_repo = dispute_repo
        self.outbox = outbox
        self.transaction_service = transaction_service

    async def execute(self, job_id: UUID, now: Optional[datetime] = None) -> ReleaseOutcome:
        now = now or datetime.now(timezone.utc)

        try:
            outcome = await self.transaction_service.execute_in_transaction(
                lambda: self._release(job_id, now)
            )
        except ConcurrentModificationError:
            # A concurrent release won; report what it did
            hold = await self.payment_repo.get_hold_by_job(job_id)
            if not hold or hold.status != WarrantyHoldStatus.RELEASED:
                raise
            outcome = ReleaseOutcome.ALREADY_RELEASED

        record_warranty_release(outcome.value)
        return outcome

    async def _release(self, job_id: UUID, now: datetime) -> ReleaseOutcome:
        await load_job(self.job_repo, job_id)

        hold = await self.payment_repo.get_hold_by_job(job_id)
        if hold is None:
            return ReleaseOutcome.NO_HOLD
        if hold.status == WarrantyHoldStatus.RELEASED:
            return ReleaseOutcome.ALREADY_RELEASED
        if hold.status == WarrantyHoldStatus.FORFEITED:
            return ReleaseOutcome.FORFEITED

        previous_status = hold.status
        dispute = await self.dispute_repo.get_open_for_job(job_id)
        if dispute:
            hold.record_deferral(f"dispute {dispute.id} is open")
            await self.payment_repo.update_hold(hold, expected_status=previous_status)
            logger.info(
                "Warranty release deferred",
                job_id=str(job_id),
                dispute_id=str(dispute.id),
                release_attempts=hold.release_attempts,
            )
            return ReleaseOutcome.DEFERRED_DISPUTE

        if hold.status == WarrantyHoldStatus.FROZEN:
            logger.warning(
                "Warranty hold frozen without an open dispute, unfreezing",
                job_id=str(job_id),
            )
            hold.unfreeze(now)

        if not hold.is_due(now):
            if hold.status != previous_status:
                await self.payment_repo.update_hold(hold, expected_status=previous_status)
            return ReleaseOutcome.NOT_DUE

        existing = await self.payment_repo.get_release(job_id, PaymentReleaseKind.WARRANTY_HOLD)
        hold.release(now)
        await self.payment_repo.update_hold(hold, expected_status=previous_status)
        if existing:
            return ReleaseOutcome.ALREADY_RELEASED

        await self.payment_repo.create_release(
            PaymentRelease(
                job_id=job_id,
                technician_id=hold.technician_id,
                kind=PaymentReleaseKind.WARRANTY_HOLD,
                amount=hold.amount,
                released_at=now,
            )
        )
        await self.outbox.record(
            WarrantyReleased(
                job_id=job_id,
                technician_id=hold.technician_id,
                amount=hold.amount,
                released_at=now,
            )
        )

        logger.info(
            "Warranty hold released",
            job_id=str(job_id),
            technician_id=str(hold.technician_id),
            amount=str(hold.amount),
        )
        return ReleaseOutcome.RELEASED


@dataclass
class ReleaseSweepResult:
    """Result of a warranty release sweep."""

    total_processed: int = 0
    outcomes: Dict[str, int] = field(default_factory=dict)
    errors: int = 0


class ReleaseDueWarrantyHoldsUseCase:
    """Periodic sweep over every hold whose release date has passed."""

    def __init__(
        self,
        payment_repo: PaymentRepositoryInterface,
        release_use_case: ReleaseWarrantyHoldUseCase,
    ):
        self.payment_repo = payment_repo
        self.release_use_case = release_use_case

    async def execute(
        self, now: Optional[datetime] = None, limit: int = 100
    ) -> ReleaseSweepResult:
        now = now or datetime.now(timezone.utc)
        holds = await self.payment_repo.find_due_holds(now, limit=limit)

        outcomes = Counter()
        errors = 0
        for hold in holds:
            try:
                outcome = await self.release_use_case.execute(hold.job_id, now)
                outcomes[outcome.value] += 1
            except Exception as e:
                errors += 1
                logger.error(
                    "Warranty release failed",
                    job_id=str(hold.job_id),
                    error=str(e),
                    exc_info=True,
                )

        result = ReleaseSweepResult(
            total_processed=len(holds), outcomes=dict(outcomes), errors=errors
        )
        logger.info(
            "Warranty release sweep finished",
            total_processed=result.total_processed,
            outcomes=result.outcomes,
            errors=errors,
        )
        return result


class ManualReleaseWarrantyHoldUseCase:
    """Admin-triggered release of a single hold."""

    def __init__(self, release_use_case: ReleaseWarrantyHoldUseCase):
        self.release_use_case = release_use_case

    async def execute(self, job_id: UUID, actor: Actor) -> ReleaseOutcome:
        ensure_role(actor, Role.ADMIN)
        return await self.release_use_case.execute(job_id)

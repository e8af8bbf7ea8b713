"""Cancellation and payment-deadline expiry use cases."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from jobflow.application.interfaces.repositories import (
    BidRepositoryInterface,
    JobRepositoryInterface,
)
from jobflow.application.use_cases.assignment import reject_open_bids
from jobflow.application.use_cases.common import ensure_job_owner, load_job
from jobflow.config.logging import get_logger
from jobflow.domain.entities.job import Job
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.actor import Actor
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import record_transition

logger = get_logger(__name__)


class CancelJobUseCase:
    """Dealer withdraws a job before work starts."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        bid_repo: BidRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.bid_repo = bid_repo
        self.transaction_service = transaction_service

    async def execute(self, job_id: UUID, actor: Actor, reason: Optional[str] = None) -> Job:
        async def operation() -> Job:
            job = await load_job(self.job_repo, job_id)
            ensure_job_owner(actor, job)

            previous_technician = job.assigned_technician_id
            job.cancel(reason)
            job = await self.job_repo.update(job)
            rejected = await reject_open_bids(self.bid_repo, job.id)

            logger.info(
                "Job cancelled",
                job_id=str(job.id),
                cancelled_by=str(actor.user_id),
                released_technician_id=str(previous_technician) if previous_technician else None,
                rejected_bids=rejected,
                reason=reason,
            )
            return job

        job = await self.transaction_service.execute_in_transaction(operation)
        record_transition(job.status.value)
        return job


@dataclass
class ExpirySweepResult:
    """Result of a payment deadline sweep."""

    total_processed: int = 0
    reopened: int = 0
    skipped: int = 0


class ExpireUnpaidAssignmentsUseCase:
    """Re-opens jobs whose dealer did not pay before the deadline."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.transaction_service = transaction_service

    async def execute(
        self, now: Optional[datetime] = None, limit: int = 100
    ) -> ExpirySweepResult:
        now = now or datetime.now(timezone.utc)
        overdue = await self.job_repo.find_payment_overdue(now, limit=limit)

        result = ExpirySweepResult(total_processed=len(overdue))
        for candidate in overdue:
            try:
                reopened = await self.transaction_service.execute_in_transaction(
                    lambda job_id=candidate.id: self._expire(job_id, now)
                )
            except ConcurrentModificationError:
                # Payment landed while we were expiring
                reopened = False

            if reopened:
                result.reopened += 1
                record_transition("PENDING")
            else:
                result.skipped += 1

        logger.info(
            "Payment deadline sweep finished",
            total_processed=result.total_processed,
            reopened=result.reopened,
            skipped=result.skipped,
        )
        return result

    async def _expire(self, job_id: UUID, now: datetime) -> bool:
        job = await load_job(self.job_repo, job_id)
        technician_id = job.assigned_technician_id
        if not job.expire_payment(now):
            return False

        await self.job_repo.update(job)
        logger.info(
            "Unpaid assignment expired",
            job_id=str(job.id),
            technician_id=str(technician_id),
        )
        return True

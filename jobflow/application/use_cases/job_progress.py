"""Job progress use cases: start, completion and the dealer's verdict."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from jobflow.application.interfaces.repositories import JobRepositoryInterface
from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.use_cases.common import ensure_job_owner, ensure_role, load_job
from jobflow.application.use_cases.warranty_release import OnJobCompletedUseCase
from jobflow.config.logging import get_logger
from jobflow.domain.entities.job import Job
from jobflow.domain.entities.payment_split import PaymentSplit
from jobflow.domain.events.job_completed import JobCompleted
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import record_transition

logger = get_logger(__name__)


class _JobProgressUseCase:
    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.transaction_service = transaction_service


class StartJobUseCase(_JobProgressUseCase):
    """Assigned technician starts work."""

    async def execute(self, job_id: UUID, actor: Actor) -> Job:
        ensure_role(actor, Role.TECHNICIAN)

        async def operation() -> Job:
            job = await load_job(self.job_repo, job_id)
            job.start(actor.user_id)
            return await self.job_repo.update(job)

        job = await self.transaction_service.execute_in_transaction(operation)
        record_transition(job.status.value)
        logger.info("Job started", job_id=str(job.id), technician_id=str(actor.user_id))
        return job


class SubmitCompletionUseCase(_JobProgressUseCase):
    """Assigned technician reports the work as done."""

    async def execute(self, job_id: UUID, actor: Actor) -> Job:
        ensure_role(actor, Role.TECHNICIAN)

        async def operation() -> Job:
            job = await load_job(self.job_repo, job_id)
            job.submit_completion(actor.user_id)
            return await self.job_repo.update(job)

        job = await self.transaction_service.execute_in_transaction(operation)
        record_transition(job.status.value)
        logger.info(
            "Job completion submitted",
            job_id=str(job.id),
            technician_id=str(actor.user_id),
        )
        return job


class RejectCompletionUseCase(_JobProgressUseCase):
    """Dealer is not satisfied; the job goes back to the technician."""

    async def execute(self, job_id: UUID, actor: Actor, reason: Optional[str] = None) -> Job:
        async def operation() -> Job:
            job = await load_job(self.job_repo, job_id)
            ensure_job_owner(actor, job)
            job.reject_completion()
            return await self.job_repo.update(job)

        job = await self.transaction_service.execute_in_transaction(operation)
        record_transition(job.status.value)
        logger.info("Job completion rejected", job_id=str(job.id), reason=reason)
        return job


@dataclass
class ApproveCompletionResult:
    """Result of approving a job's completion."""

    job: Job
    split: PaymentSplit


class ApproveCompletionUseCase(_JobProgressUseCase):
    """Dealer approves the work; payment is split and the hold starts."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
        on_job_completed: OnJobCompletedUseCase,
        outbox: TransactionalOutbox,
    ):
        super().__init__(job_repo, transaction_service)
        self.on_job_completed = on_job_completed
        self.outbox = outbox

    async def execute(self, job_id: UUID, actor: Actor) -> ApproveCompletionResult:
        async def operation() -> ApproveCompletionResult:
            job = await load_job(self.job_repo, job_id)
            ensure_job_owner(actor, job)

            job.approve_completion()
            job = await self.job_repo.update(job)
            split = await self.on_job_completed.apply(job)

            await self.outbox.record(
                JobCompleted(
                    job_id=job.id,
                    technician_id=job.assigned_technician_id,
                    total_amount=split.total_amount,
                    immediate_release=split.immediate_release,
                    warranty_hold=split.warranty_hold,
                    completed_at=job.completed_at,
                )
            )
            return ApproveCompletionResult(job=job, split=split)

        result = await self.transaction_service.execute_in_transaction(operation)
        record_transition(result.job.status.value)
        logger.info(
            "Job completed",
            job_id=str(result.job.id),
            technician_id=str(result.job.assigned_technician_id),
            immediate_release=str(result.split.immediate_release),
            warranty_hold=str(result.split.warranty_hold),
        )
        return result

"""Exclusive job assignment and the direct-accept use case."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from uuid import UUID

from jobflow.application.interfaces.repositories import (
    BidRepositoryInterface,
    JobRepositoryInterface,
)
from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.use_cases.common import ensure_role, load_job
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.domain.entities.job import Job
from jobflow.domain.events.job_assigned import JobAssigned
from jobflow.domain.exceptions.workflow_error import (
    AlreadyAssignedError,
    ConcurrentModificationError,
    InvalidStateError,
    TermsNotAcceptedError,
)
from jobflow.domain.state_machine import ensure_operation_allowed
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import (
    record_assignment,
    record_assignment_race_lost,
)

logger = get_logger(__name__)


def ensure_assignable(job: Job, technician_id: UUID, operation: str) -> None:
    """Refuse assignment of a job someone else already holds."""
    if (
        job.status != JobStatus.PENDING
        and job.assigned_technician_id is not None
        and job.assigned_technician_id != technician_id
    ):
        raise AlreadyAssignedError(job.id)
    ensure_operation_allowed(job.status, operation)


async def claim_job(job_repo: JobRepositoryInterface, job: Job, path: str) -> Job:
    """Persist an assignment; losing a concurrent race is AlreadyAssignedError."""
    try:
        return await job_repo.update(job)
    except ConcurrentModificationError:
        current = await job_repo.get_by_id(job.id)
        if current is not None and current.assigned_technician_id is None:
            # A bid or counter touched the job; it is still up for grabs
            raise
        record_assignment_race_lost(path)
        logger.info(
            "Assignment race lost",
            job_id=str(job.id),
            technician_id=str(job.assigned_technician_id),
            path=path,
        )
        raise AlreadyAssignedError(job.id)


async def reject_open_bids(
    bid_repo: BidRepositoryInterface, job_id: UUID, keep: Iterable[UUID] = ()
) -> int:
    """Reject every live bid and counter-offer on a job except ``keep``."""
    keep = set(keep)
    rejected = 0
    for bid in await bid_repo.list_active_by_job(job_id):
        if bid.id in keep:
            continue
        previous_status = bid.status
        bid.reject()
        await bid_repo.update(bid, expected_status=previous_status)
        rejected += 1
    return rejected


def assigned_event(job: Job, bid_id: Optional[UUID] = None) -> JobAssigned:
    return JobAssigned(
        job_id=job.id,
        technician_id=job.assigned_technician_id,
        status=job.status.value,
        agreed_price=job.agreed_price,
        assigned_at=job.assigned_at,
        bid_id=bid_id,
    )


class AcceptJobDirectUseCase:
    """Technician takes a job at its posted price, without bidding."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        bid_repo: BidRepositoryInterface,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
        payment_due_minutes: int = settings.PAYMENT_DUE_MINUTES,
    ):
        self.job_repo = job_repo
        self.bid_repo = bid_repo
        self.outbox = outbox
        self.transaction_service = transaction_service
        self.payment_due_minutes = payment_due_minutes

    async def execute(self, job_id: UUID, actor: Actor, terms_accepted: bool = False) -> Job:
        ensure_role(actor, Role.TECHNICIAN)
        technician_id = actor.user_id

        async def operation() -> Job:
            job = await load_job(self.job_repo, job_id)
            ensure_assignable(job, technician_id, "accept")

            own_bids = await self.bid_repo.list_for_technician(job.id, technician_id)
            if any(bid.is_active for bid in own_bids):
                raise InvalidStateError(
                    "Technician is negotiating this job through bids; "
                    "direct acceptance is not available",
                    current_status=job.status.value,
                )

            if job.amount is not None and job.amount > 0 and not terms_accepted:
                raise TermsNotAcceptedError()

            payment_due_at = datetime.now(timezone.utc) + timedelta(
                minutes=self.payment_due_minutes
            )
            job.assign_direct(technician_id, payment_due_at=payment_due_at)

            job = await claim_job(self.job_repo, job, "direct")
            rejected = await reject_open_bids(self.bid_repo, job.id)
            await self.outbox.record(assigned_event(job))

            logger.info(
                "Job accepted directly",
                job_id=str(job.id),
                technician_id=str(technician_id),
                status=job.status.value,
                rejected_bids=rejected,
            )
            return job

        job = await self.transaction_service.execute_in_transaction(operation)
        record_assignment("direct")
        return job

"""Dispute use cases. An open dispute freezes the job's warranty hold."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from jobflow.application.interfaces.repositories import (
    DisputeRepositoryInterface,
    JobRepositoryInterface,
    PaymentRepositoryInterface,
)
from jobflow.application.use_cases.common import ensure_job_owner, ensure_role, load_job
from jobflow.config.logging import get_logger
from jobflow.domain.entities.dispute import Dispute
from jobflow.domain.exceptions.validation_error import ValidationError
from jobflow.domain.exceptions.workflow_error import InvalidStateError, NotFoundError
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.dispute_status import DisputeStatus
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)

logger = get_logger(__name__)


class _DisputeUseCase:
    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        payment_repo: PaymentRepositoryInterface,
        dispute_repo: DisputeRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.payment_repo = payment_repo
        self.dispute_repo = dispute_repo
        self.transaction_service = transaction_service


class OpenDisputeUseCase(_DisputeUseCase):
    """Dealer complains about completed work."""

    async def execute(self, job_id: UUID, actor: Actor, reason: str) -> Dispute:
        async def operation() -> Dispute:
            job = await load_job(self.job_repo, job_id)
            ensure_job_owner(actor, job)
            if job.status != JobStatus.COMPLETED:
                raise InvalidStateError(
                    f"Cannot dispute job in {job.status.value} state. Job must be COMPLETED.",
                    current_status=job.status.value,
                )
            if await self.dispute_repo.get_open_for_job(job.id):
                raise InvalidStateError("Job already has an open dispute")

            hold = await self.payment_repo.get_hold_by_job(job.id)
            if hold and hold.status.is_final():
                raise InvalidStateError(
                    f"Warranty hold is already {hold.status.value}",
                    current_status=hold.status.value,
                )

            try:
                dispute = Dispute(job_id=job.id, raised_by=actor.user_id, reason=reason)
            except ValueError as e:
                raise ValidationError(str(e))
            dispute = await self.dispute_repo.create(dispute)

            if hold:
                previous_status = hold.status
                if hold.freeze(datetime.now(timezone.utc)):
                    await self.payment_repo.update_hold(hold, expected_status=previous_status)
            return dispute

        dispute = await self.transaction_service.execute_in_transaction(operation)
        logger.info(
            "Dispute opened",
            dispute_id=str(dispute.id),
            job_id=str(job_id),
            raised_by=str(actor.user_id),
        )
        return dispute


class ResolveDisputeUseCase(_DisputeUseCase):
    """Admin settles a dispute, releasing or forfeiting the hold."""

    async def execute(
        self,
        dispute_id: UUID,
        actor: Actor,
        outcome: DisputeStatus,
        note: Optional[str] = None,
    ) -> Dispute:
        ensure_role(actor, Role.ADMIN)

        async def operation() -> Dispute:
            dispute = await self.dispute_repo.get_by_id(dispute_id)
            if not dispute:
                raise NotFoundError("Dispute", dispute_id)

            try:
                dispute.resolve(outcome, resolved_by=actor.user_id, note=note)
            except ValueError as e:
                raise ValidationError(str(e))
            dispute = await self.dispute_repo.update(dispute)

            hold = await self.payment_repo.get_hold_by_job(dispute.job_id)
            if hold and not hold.status.is_final():
                previous_status = hold.status
                now = datetime.now(timezone.utc)
                if dispute.status == DisputeStatus.RESOLVED_FOR_DEALER:
                    hold.forfeit(now)
                else:
                    hold.unfreeze(now)
                await self.payment_repo.update_hold(hold, expected_status=previous_status)
            return dispute

        dispute = await self.transaction_service.execute_in_transaction(operation)
        logger.info(
            "Dispute resolved",
            dispute_id=str(dispute.id),
            job_id=str(dispute.job_id),
            outcome=dispute.status.value,
        )
        return dispute

"""Post job use case."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from jobflow.application.interfaces.repositories import JobRepositoryInterface
from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.use_cases.common import ensure_role
from jobflow.config.logging import get_logger
from jobflow.domain.entities.job import Job
from jobflow.domain.events.job_posted import JobPosted
from jobflow.domain.exceptions.validation_error import (
    InvalidAmountError,
    ValidationError,
)
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.customer_contact import CustomerContact
from jobflow.domain.value_objects.location import JobLocation
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import record_job_posted

logger = get_logger(__name__)


@dataclass
class PostJobRequest:
    """Request for posting a job."""

    title: str
    description: str
    location: JobLocation
    customer: Optional[CustomerContact] = None
    work_details: Optional[str] = None
    amount: Optional[Decimal] = None
    warranty_days: Optional[int] = None


class PostJobUseCase:
    """Use case for a dealer posting a new job for technicians."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.outbox = outbox
        self.transaction_service = transaction_service

    async def execute(self, actor: Actor, request: PostJobRequest) -> Job:
        ensure_role(actor, Role.DEALER)

        if request.amount is not None and request.amount <= 0:
            raise InvalidAmountError("amount", request.amount)

        try:
            job = Job(
                title=request.title,
                description=request.description,
                dealer_id=actor.user_id,
                location=request.location,
                customer=request.customer,
                work_details=request.work_details,
                amount=request.amount,
                warranty_days=request.warranty_days,
            )
        except ValueError as e:
            raise ValidationError(str(e))

        async def operation() -> Job:
            created = await self.job_repo.create(job)
            await self.outbox.record(
                JobPosted(
                    job_id=created.id,
                    dealer_id=created.dealer_id,
                    job_number=created.job_number,
                    amount=created.amount,
                    city=created.location.city,
                    posted_at=created.created_at,
                )
            )
            return created

        created = await self.transaction_service.execute_in_transaction(operation)
        record_job_posted()

        logger.info(
            "Job posted",
            job_id=str(created.id),
            job_number=created.job_number,
            dealer_id=str(created.dealer_id),
            amount=str(created.amount) if created.amount is not None else None,
        )
        return created

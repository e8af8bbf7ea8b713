"""Payment gateway use cases: order creation and the capture webhook."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from jobflow.application.interfaces.gateways import PaymentGatewayInterface, PaymentIntent
from jobflow.application.interfaces.repositories import JobRepositoryInterface
from jobflow.application.use_cases.common import ensure_job_owner, load_job
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.domain.entities.job import Job
from jobflow.domain.exceptions.validation_error import ValidationError
from jobflow.domain.exceptions.workflow_error import InvalidStateError
from jobflow.domain.state_machine import ensure_operation_allowed
from jobflow.domain.value_objects.actor import Actor
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import record_payment_capture

logger = get_logger(__name__)


class CreatePaymentIntentUseCase:
    """Dealer asks the gateway for an order covering the agreed price."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        gateway: PaymentGatewayInterface,
        transaction_service: TransactionService,
        currency: str = settings.PAYMENT_CURRENCY,
    ):
        self.job_repo = job_repo
        self.gateway = gateway
        self.transaction_service = transaction_service
        self.currency = currency

    async def execute(self, job_id: UUID, actor: Actor) -> PaymentIntent:
        async def operation() -> PaymentIntent:
            job = await load_job(self.job_repo, job_id)
            ensure_job_owner(actor, job)
            ensure_operation_allowed(job.status, "lock_payment")

            if job.payment_locked:
                raise InvalidStateError(
                    "Payment already captured for this job",
                    current_status=job.status.value,
                )
            if not job.requires_payment:
                raise InvalidStateError(
                    "Job has no agreed price to pay", current_status=job.status.value
                )

            intent = await self.gateway.create_payment_intent(
                amount=job.agreed_price,
                currency=self.currency,
                receipt=job.job_number,
                notes={"job_id": str(job.id)},
            )
            job.attach_payment_order(intent.order_id)
            await self.job_repo.update(job)
            return intent

        intent = await self.transaction_service.execute_in_transaction(operation)
        logger.info(
            "Payment intent created",
            job_id=str(job_id),
            order_id=intent.order_id,
            amount=str(intent.amount),
            gateway=intent.gateway,
        )
        return intent


class HandlePaymentCapturedUseCase:
    """Locks a job's payment when the gateway confirms capture.

    Gateways redeliver webhooks, so the same payment arriving twice is a no-op.
    """

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.transaction_service = transaction_service

    async def execute(
        self,
        job_id: UUID,
        payment_reference: str,
        amount: Optional[Decimal] = None,
    ) -> Job:
        if not payment_reference:
            raise ValidationError("Payment reference is required")

        async def operation() -> Job:
            job = await load_job(self.job_repo, job_id)

            if (
                amount is not None
                and not job.payment_locked
                and job.agreed_price is not None
                and Decimal(str(amount)) != job.agreed_price
            ):
                raise ValidationError(
                    f"Captured amount {amount} does not match agreed price {job.agreed_price}"
                )

            if not job.lock_payment(payment_reference):
                logger.info(
                    "Duplicate payment capture ignored",
                    job_id=str(job.id),
                    payment_reference=payment_reference,
                )
                record_payment_capture("duplicate")
                return job

            job = await self.job_repo.update(job)
            record_payment_capture("locked")
            return job

        job = await self.transaction_service.execute_in_transaction(operation)
        logger.info(
            "Payment captured",
            job_id=str(job.id),
            payment_reference=payment_reference,
            status=job.status.value,
        )
        return job

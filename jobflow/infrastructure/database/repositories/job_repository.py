"""Job repository implementation."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.repositories import JobRepositoryInterface
from jobflow.config.logging import get_logger
from jobflow.domain.entities.job import Job
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.customer_contact import CustomerContact
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.location import JobLocation
from jobflow.infrastructure.database.models.job import JobModel

logger = get_logger(__name__)


class JobRepository(JobRepositoryInterface):
    """Job repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, job_id: UUID) -> Optional[Job]:
        """Get job by ID."""
        stmt = (
            select(JobModel)
            .where(JobModel.id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()

        return self._model_to_entity(model) if model else None

    async def create(self, job: Job) -> Job:
        """Create a new job."""
        job_model = JobModel(
            id=job.id,
            version=job.version,
            created_at=job.created_at,
            **self._entity_values(job),
        )

        self.db.add(job_model)
        # Use flush instead of commit to maintain transaction atomicity
        await self.db.flush()
        await self.db.refresh(job_model)

        return self._model_to_entity(job_model)

    async def update(self, job: Job) -> Job:
        """Update an existing job, guarded by its version."""
        job.updated_at = datetime.now(timezone.utc)
        stmt = (
            update(JobModel)
            .where(JobModel.id == job.id, JobModel.version == job.version)
            .values(version=job.version + 1, **self._entity_values(job))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount != 1:
            logger.info(
                "Stale job update refused",
                job_id=str(job.id),
                expected_version=job.version,
            )
            raise ConcurrentModificationError("Job", job.id)

        job.version += 1
        return job

    async def find_by_status(self, status: JobStatus, limit: int = 100) -> List[Job]:
        """Find jobs in a given status, oldest first."""
        stmt = (
            select(JobModel)
            .where(JobModel.status == JobStatus(status).value)
            .order_by(JobModel.created_at)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_payment_overdue(self, now: datetime, limit: int = 100) -> List[Job]:
        """Find jobs waiting for payment whose deadline has passed."""
        stmt = (
            select(JobModel)
            .where(
                JobModel.status == JobStatus.WAITING_FOR_PAYMENT.value,
                JobModel.payment_locked.is_(False),
                JobModel.payment_due_at.is_not(None),
                JobModel.payment_due_at <= now,
            )
            .order_by(JobModel.payment_due_at)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @staticmethod
    def _entity_values(job: Job) -> Dict[str, Any]:
        """Flatten a job into column values."""
        customer = job.customer
        return {
            "job_number": job.job_number,
            "title": job.title,
            "description": job.description,
            "work_details": job.work_details,
            "amount": job.amount,
            "warranty_days": job.warranty_days,
            "city": job.location.city,
            "state": job.location.state,
            "place_name": job.location.place_name,
            "latitude": job.location.latitude,
            "longitude": job.location.longitude,
            "address": job.location.address,
            "pincode": job.location.pincode,
            "customer_name": customer.name if customer else None,
            "customer_phone": customer.phone if customer else None,
            "customer_email": customer.email if customer else None,
            "dealer_id": job.dealer_id,
            "status": job.status.value,
            "assigned_technician_id": job.assigned_technician_id,
            "final_price": job.final_price,
            "negotiation_rounds": job.negotiation_rounds,
            "payment_locked": job.payment_locked,
            "payment_order_id": job.payment_order_id,
            "payment_reference": job.payment_reference,
            "payment_due_at": job.payment_due_at,
            "assigned_at": job.assigned_at,
            "started_at": job.started_at,
            "completion_submitted_at": job.completion_submitted_at,
            "completed_at": job.completed_at,
            "cancelled_at": job.cancelled_at,
            "cancellation_reason": job.cancellation_reason,
            "updated_at": job.updated_at,
        }

    def _model_to_entity(self, model: JobModel) -> Job:
        """Convert SQLAlchemy model to domain entity."""
        location = JobLocation(
            city=model.city,
            state=model.state,
            place_name=model.place_name,
            latitude=model.latitude,
            longitude=model.longitude,
            address=model.address,
            pincode=model.pincode,
        )
        customer = None
        if model.customer_name:
            customer = CustomerContact(
                name=model.customer_name,
                phone=model.customer_phone,
                email=model.customer_email,
            )

        return Job(
            id=model.id,
            job_number=model.job_number,
            title=model.title,
            description=model.description or "",
            work_details=model.work_details,
            amount=model.amount,
            warranty_days=model.warranty_days,
            location=location,
            customer=customer,
            dealer_id=model.dealer_id,
            status=JobStatus(model.status),
            assigned_technician_id=model.assigned_technician_id,
            final_price=model.final_price,
            negotiation_rounds=model.negotiation_rounds or 0,
            payment_locked=bool(model.payment_locked),
            payment_order_id=model.payment_order_id,
            payment_reference=model.payment_reference,
            payment_due_at=model.payment_due_at,
            assigned_at=model.assigned_at,
            started_at=model.started_at,
            completion_submitted_at=model.completion_submitted_at,
            completed_at=model.completed_at,
            cancelled_at=model.cancelled_at,
            cancellation_reason=model.cancellation_reason,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

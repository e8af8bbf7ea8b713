"""Dispute repository implementation."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.repositories import DisputeRepositoryInterface
from jobflow.domain.entities.dispute import Dispute
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.dispute_status import DisputeStatus
from jobflow.infrastructure.database.models.dispute import DisputeModel


class DisputeRepository(DisputeRepositoryInterface):
    """Dispute repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, dispute_id: UUID) -> Optional[Dispute]:
        stmt = (
            select(DisputeModel)
            .where(DisputeModel.id == dispute_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def get_open_for_job(self, job_id: UUID) -> Optional[Dispute]:
        stmt = (
            select(DisputeModel)
            .where(
                DisputeModel.job_id == job_id,
                DisputeModel.status == DisputeStatus.OPEN.value,
            )
            .order_by(DisputeModel.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def create(self, dispute: Dispute) -> Dispute:
        model = DisputeModel(
            id=dispute.id,
            job_id=dispute.job_id,
            raised_by=dispute.raised_by,
            reason=dispute.reason,
            status=dispute.status.value,
            created_at=dispute.created_at,
        )
        self.db.add(model)
        await self.db.flush()
        await self.db.refresh(model)
        return self._model_to_entity(model)

    async def update(self, dispute: Dispute) -> Dispute:
        """Record a resolution; only an open dispute can be resolved."""
        stmt = (
            update(DisputeModel)
            .where(
                DisputeModel.id == dispute.id,
                DisputeModel.status == DisputeStatus.OPEN.value,
            )
            .values(
                status=dispute.status.value,
                resolved_by=dispute.resolved_by,
                resolution_note=dispute.resolution_note,
                resolved_at=dispute.resolved_at,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError("Dispute", dispute.id)
        return dispute

    def _model_to_entity(self, model: DisputeModel) -> Dispute:
        return Dispute(
            id=model.id,
            job_id=model.job_id,
            raised_by=model.raised_by,
            reason=model.reason,
            status=DisputeStatus(model.status),
            resolved_by=model.resolved_by,
            resolution_note=model.resolution_note,
            resolved_at=model.resolved_at,
            created_at=model.created_at,
        )

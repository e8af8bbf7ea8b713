"""
Payment split, warranty hold and payout ledger repository implementation.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.repositories import PaymentRepositoryInterface
from jobflow.config.logging import get_logger
from jobflow.domain.entities.payment_release import PaymentRelease
from jobflow.domain.entities.payment_split import PaymentSplit
from jobflow.domain.entities.warranty_hold import WarrantyHold
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.warranty_hold_status import (
    PaymentReleaseKind,
    WarrantyHoldStatus,
)
from jobflow.infrastructure.database.models.payment import (
    PaymentReleaseModel,
    PaymentSplitModel,
    WarrantyHoldModel,
)

logger = get_logger(__name__)


class PaymentRepository(PaymentRepositoryInterface):
    """Payment repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Splits

    async def get_split_by_job(self, job_id: UUID) -> Optional[PaymentSplit]:
        stmt = (
            select(PaymentSplitModel)
            .where(PaymentSplitModel.job_id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()
        return self._split_to_entity(model) if model else None

    async def create_split(self, split: PaymentSplit) -> PaymentSplit:
        model = PaymentSplitModel(
            id=split.id,
            job_id=split.job_id,
            technician_id=split.technician_id,
            total_amount=split.total_amount,
            immediate_release=split.immediate_release,
            warranty_hold=split.warranty_hold,
            immediate_released_at=split.immediate_released_at,
            created_at=split.created_at,
        )
        self.db.add(model)
        await self.db.flush()
        await self.db.refresh(model)
        return self._split_to_entity(model)

    async def update_split(self, split: PaymentSplit) -> PaymentSplit:
        stmt = (
            update(PaymentSplitModel)
            .where(PaymentSplitModel.id == split.id)
            .values(
                immediate_released_at=split.immediate_released_at,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError("PaymentSplit", split.id)
        return split

    # Warranty holds

    async def get_hold_by_job(self, job_id: UUID) -> Optional[WarrantyHold]:
        stmt = (
            select(WarrantyHoldModel)
            .where(WarrantyHoldModel.job_id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()
        return self._hold_to_entity(model) if model else None

    async def create_hold(self, hold: WarrantyHold) -> WarrantyHold:
        model = WarrantyHoldModel(
            id=hold.id,
            job_id=hold.job_id,
            technician_id=hold.technician_id,
            amount=hold.amount,
            warranty_days=hold.warranty_days,
            starts_at=hold.starts_at,
            release_due_at=hold.release_due_at,
            effective_release_at=hold.effective_release_at,
            status=hold.status.value,
            frozen_at=hold.frozen_at,
            paused_seconds=hold.paused_seconds,
            released_at=hold.released_at,
            forfeited_at=hold.forfeited_at,
            release_attempts=hold.release_attempts,
            last_deferred_reason=hold.last_deferred_reason,
            created_at=hold.created_at,
            updated_at=hold.updated_at,
        )
        self.db.add(model)
        await self.db.flush()
        await self.db.refresh(model)
        return self._hold_to_entity(model)

    async def update_hold(
        self, hold: WarrantyHold, expected_status: WarrantyHoldStatus
    ) -> WarrantyHold:
        """Update a hold if its stored status is unchanged."""
        stmt = (
            update(WarrantyHoldModel)
            .where(
                WarrantyHoldModel.id == hold.id,
                WarrantyHoldModel.status == WarrantyHoldStatus(expected_status).value,
            )
            .values(
                status=hold.status.value,
                effective_release_at=hold.effective_release_at,
                frozen_at=hold.frozen_at,
                paused_seconds=hold.paused_seconds,
                released_at=hold.released_at,
                forfeited_at=hold.forfeited_at,
                release_attempts=hold.release_attempts,
                last_deferred_reason=hold.last_deferred_reason,
                updated_at=hold.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            logger.info(
                "Stale warranty hold update refused",
                job_id=str(hold.job_id),
                expected_status=WarrantyHoldStatus(expected_status).value,
            )
            raise ConcurrentModificationError("WarrantyHold", hold.id)
        return hold

    async def find_due_holds(self, now: datetime, limit: int = 100) -> List[WarrantyHold]:
        """Find holds still awaiting payout whose release date has passed.

        Frozen holds are included so deferrals are recorded against them.
        """
        stmt = (
            select(WarrantyHoldModel)
            .where(
                or_(
                    WarrantyHoldModel.status == WarrantyHoldStatus.LOCKED.value,
                    WarrantyHoldModel.status == WarrantyHoldStatus.FROZEN.value,
                ),
                WarrantyHoldModel.effective_release_at <= now,
            )
            .order_by(WarrantyHoldModel.effective_release_at)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._hold_to_entity(model) for model in result.scalars().all()]

    # Payout ledger

    async def get_release(
        self, job_id: UUID, kind: PaymentReleaseKind
    ) -> Optional[PaymentRelease]:
        stmt = select(PaymentReleaseModel).where(
            PaymentReleaseModel.job_id == job_id,
            PaymentReleaseModel.kind == PaymentReleaseKind(kind).value,
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()
        return self._release_to_entity(model) if model else None

    async def create_release(self, release: PaymentRelease) -> PaymentRelease:
        model = PaymentReleaseModel(
            id=release.id,
            job_id=release.job_id,
            technician_id=release.technician_id,
            kind=release.kind.value,
            amount=release.amount,
            released_at=release.released_at,
        )
        self.db.add(model)
        # The (job_id, kind) unique constraint rejects a second payout here
        await self.db.flush()
        return release

    def _split_to_entity(self, model: PaymentSplitModel) -> PaymentSplit:
        return PaymentSplit(
            id=model.id,
            job_id=model.job_id,
            technician_id=model.technician_id,
            total_amount=model.total_amount,
            immediate_release=model.immediate_release,
            warranty_hold=model.warranty_hold,
            immediate_released_at=model.immediate_released_at,
            created_at=model.created_at,
        )

    def _hold_to_entity(self, model: WarrantyHoldModel) -> WarrantyHold:
        return WarrantyHold(
            id=model.id,
            job_id=model.job_id,
            technician_id=model.technician_id,
            amount=model.amount,
            warranty_days=model.warranty_days,
            starts_at=model.starts_at,
            status=WarrantyHoldStatus(model.status),
            release_due_at=model.release_due_at,
            effective_release_at=model.effective_release_at,
            frozen_at=model.frozen_at,
            paused_seconds=model.paused_seconds or 0,
            released_at=model.released_at,
            forfeited_at=model.forfeited_at,
            release_attempts=model.release_attempts or 0,
            last_deferred_reason=model.last_deferred_reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _release_to_entity(self, model: PaymentReleaseModel) -> PaymentRelease:
        return PaymentRelease(
            id=model.id,
            job_id=model.job_id,
            technician_id=model.technician_id,
            kind=PaymentReleaseKind(model.kind),
            amount=model.amount,
            released_at=model.released_at,
        )

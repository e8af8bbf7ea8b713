"""Bid repository implementation."""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.repositories import BidRepositoryInterface
from jobflow.domain.entities.bid import Bid
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.infrastructure.database.models.bid import BidModel

_ACTIVE = (BidStatus.PENDING.value, BidStatus.COUNTERED.value)


class BidRepository(BidRepositoryInterface):
    """Bid repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, bid_id: UUID) -> Optional[Bid]:
        stmt = (
            select(BidModel)
            .where(BidModel.id == bid_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def create(self, bid: Bid) -> Bid:
        bid_model = BidModel(
            id=bid.id,
            job_id=bid.job_id,
            technician_id=bid.technician_id,
            offered_price=bid.offered_price,
            message=bid.message,
            status=bid.status.value,
            round_number=bid.round_number,
            is_counter_offer=bid.is_counter_offer,
            previous_bid_id=bid.previous_bid_id,
            responded_at=bid.responded_at,
            created_at=bid.created_at,
            updated_at=bid.updated_at,
        )
        self.db.add(bid_model)
        await self.db.flush()
        await self.db.refresh(bid_model)
        return self._model_to_entity(bid_model)

    async def update(self, bid: Bid, expected_status: BidStatus) -> Bid:
        """Update a bid if its stored status is unchanged."""
        bid.updated_at = datetime.now(timezone.utc)
        stmt = (
            update(BidModel)
            .where(BidModel.id == bid.id, BidModel.status == BidStatus(expected_status).value)
            .values(
                offered_price=bid.offered_price,
                message=bid.message,
                status=bid.status.value,
                responded_at=bid.responded_at,
                updated_at=bid.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError("Bid", bid.id)
        return bid

    async def list_by_job(self, job_id: UUID) -> List[Bid]:
        return await self._list(BidModel.job_id == job_id)

    async def list_active_by_job(self, job_id: UUID) -> List[Bid]:
        return await self._list(BidModel.job_id == job_id, BidModel.status.in_(_ACTIVE))

    async def list_for_technician(self, job_id: UUID, technician_id: UUID) -> List[Bid]:
        return await self._list(
            BidModel.job_id == job_id, BidModel.technician_id == technician_id
        )

    async def find_expired_pending(self, cutoff: datetime, limit: int = 100) -> List[Bid]:
        stmt = (
            select(BidModel)
            .where(
                BidModel.status == BidStatus.PENDING.value,
                BidModel.created_at <= cutoff,
            )
            .order_by(BidModel.created_at)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def _list(self, *criteria) -> List[Bid]:
        stmt = (
            select(BidModel)
            .where(*criteria)
            .order_by(BidModel.created_at, BidModel.round_number)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    def _model_to_entity(self, model: BidModel) -> Bid:
        """Convert SQLAlchemy model to domain entity."""
        return Bid(
            id=model.id,
            job_id=model.job_id,
            technician_id=model.technician_id,
            offered_price=model.offered_price,
            message=model.message,
            status=BidStatus(model.status),
            round_number=model.round_number,
            is_counter_offer=bool(model.is_counter_offer),
            previous_bid_id=model.previous_bid_id,
            responded_at=model.responded_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

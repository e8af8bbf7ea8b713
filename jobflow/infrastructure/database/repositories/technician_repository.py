"""
Technician repository implementation.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.repositories import TechnicianRepositoryInterface
from jobflow.domain.entities.technician import Technician
from jobflow.infrastructure.database.models.technician import TechnicianModel


class TechnicianRepository(TechnicianRepositoryInterface):
    """Technician repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, technician_id: UUID) -> Optional[Technician]:
        """Get technician by ID."""
        result = await self.session.execute(
            select(TechnicianModel).where(TechnicianModel.id == technician_id)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def get_many(self, technician_ids: List[UUID]) -> List[Technician]:
        """Get several technicians at once."""
        if not technician_ids:
            return []
        result = await self.session.execute(
            select(TechnicianModel).where(TechnicianModel.id.in_(set(technician_ids)))
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def create(self, technician: Technician) -> Technician:
        """Create a new technician."""
        model = TechnicianModel(
            id=technician.id,
            full_name=technician.full_name,
            mobile=technician.mobile,
            email=technician.email,
            place_name=technician.place_name,
            service_radius_km=technician.service_radius_km,
            rating=technician.rating,
            trust_score=technician.trust_score,
            created_at=technician.created_at,
            updated_at=technician.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    def _model_to_entity(self, model: TechnicianModel) -> Technician:
        return Technician(
            id=model.id,
            full_name=model.full_name,
            mobile=model.mobile,
            email=model.email,
            place_name=model.place_name,
            service_radius_km=model.service_radius_km,
            rating=model.rating,
            trust_score=model.trust_score,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

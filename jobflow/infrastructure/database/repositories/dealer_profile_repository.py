"""
Dealer profile repository implementation.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.repositories import DealerProfileRepositoryInterface
from jobflow.domain.entities.dealer_profile import DealerProfile
from jobflow.infrastructure.database.models.dealer_profile import DealerProfileModel


class DealerProfileRepository(DealerProfileRepositoryInterface):
    """Dealer profile repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> Optional[DealerProfile]:
        """Get dealer profile by user ID."""
        result = await self.session.execute(
            select(DealerProfileModel).where(DealerProfileModel.id == user_id)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def create(self, profile: DealerProfile) -> DealerProfile:
        """Create a dealer profile."""
        model = DealerProfileModel(
            id=profile.user_id,
            business_name=profile.business_name,
            full_name=profile.full_name,
            email=profile.email,
            phone=profile.phone,
            trust_score=profile.trust_score,
            rating=profile.rating,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    def _model_to_entity(self, model: DealerProfileModel) -> DealerProfile:
        return DealerProfile(
            user_id=model.id,
            business_name=model.business_name,
            full_name=model.full_name,
            email=model.email,
            phone=model.phone,
            trust_score=model.trust_score,
            rating=model.rating,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

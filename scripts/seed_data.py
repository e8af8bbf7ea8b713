#!/usr/bin/env python3
"""
Seed database with dealers and technicians for development.

The printed ids go into the X-User-Id header when calling the API.
"""

import asyncio
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from jobflow.config.database import get_async_session_factory
from jobflow.config.logging import configure_logging, get_logger
from jobflow.domain.entities.dealer_profile import DealerProfile
from jobflow.domain.entities.technician import Technician
from jobflow.infrastructure.database.models import DealerProfileModel
from jobflow.infrastructure.database.repositories import (
    DealerProfileRepository,
    TechnicianRepository,
)

logger = get_logger(__name__)

DEALERS = [
    DealerProfile(
        user_id=UUID("7b1d2c3e-0000-4000-8000-000000000001"),
        business_name="Sharma Electronics",
        full_name="Anil Sharma",
        email="anil@sharma-electronics.example",
        phone="+919800000001",
        trust_score=Decimal("92.50"),
        rating=Decimal("4.60"),
    ),
    DealerProfile(
        user_id=UUID("7b1d2c3e-0000-4000-8000-000000000002"),
        business_name="CoolAir Services",
        full_name="Meera Iyer",
        email="meera@coolair.example",
        phone="+919800000002",
        trust_score=Decimal("88.00"),
        rating=Decimal("4.30"),
    ),
]

TECHNICIANS = [
    Technician(
        id=UUID("5e7f8a9b-0000-4000-8000-000000000001"),
        full_name="Ravi Kumar",
        mobile="+919900000001",
        email="ravi@example.com",
        place_name="Indiranagar",
        service_radius_km=15,
        rating=Decimal("4.80"),
        trust_score=Decimal("95.00"),
    ),
    Technician(
        id=UUID("5e7f8a9b-0000-4000-8000-000000000002"),
        full_name="Farhan Ali",
        mobile="+919900000002",
        email="farhan@example.com",
        place_name="Koramangala",
        service_radius_km=10,
        rating=Decimal("4.50"),
        trust_score=Decimal("90.00"),
    ),
]


async def seed_database():
    """Seed database with test data."""
    session_factory = get_async_session_factory()
    try:
        async with session_factory() as session:
            existing = await session.scalar(select(func.count()).select_from(DealerProfileModel))
            if existing:
                logger.info("Database already has data, skipping seed")
                return

            dealer_repo = DealerProfileRepository(session)
            technician_repo = TechnicianRepository(session)
            for dealer in DEALERS:
                await dealer_repo.create(dealer)
            for technician in TECHNICIANS:
                await technician_repo.create(technician)
            await session.commit()

        for dealer in DEALERS:
            logger.info("Seeded dealer", user_id=str(dealer.user_id), name=dealer.business_name)
        for technician in TECHNICIANS:
            logger.info("Seeded technician", user_id=str(technician.id), name=technician.full_name)
    finally:
        await session_factory.kw["bind"].dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed_database())

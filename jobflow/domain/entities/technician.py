"""
Technician domain entity.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID


class Technician:
    """Technician profile as seen by dealers evaluating bids."""

    def __init__(
        self,
        id: UUID,
        full_name: str,
        mobile: Optional[str] = None,
        email: Optional[str] = None,
        place_name: Optional[str] = None,
        service_radius_km: Optional[int] = None,
        rating: Optional[Decimal] = None,
        trust_score: Optional[Decimal] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.full_name = full_name
        self.mobile = mobile
        self.email = email
        self.place_name = place_name
        self.service_radius_km = service_radius_km
        self.rating = rating
        self.trust_score = trust_score
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)

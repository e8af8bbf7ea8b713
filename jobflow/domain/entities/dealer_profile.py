"""
Dealer profile domain entity.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID


class DealerProfile:
    """Dealer who posts jobs, as seen by technicians."""

    def __init__(
        self,
        user_id: UUID,
        business_name: str,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        trust_score: Optional[Decimal] = None,
        rating: Optional[Decimal] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.user_id = user_id
        self.business_name = business_name
        self.full_name = full_name
        self.email = email
        self.phone = phone
        self.trust_score = trust_score
        self.rating = rating
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)

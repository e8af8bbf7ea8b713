"""
Bid and counter-offer API schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from jobflow.domain.value_objects.bid_status import BidStatus

from .common import EntityResponse, TimestampMixin


class BidCreateRequest(BaseModel):
    """Bid placement request schema."""

    offered_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    message: Optional[str] = Field(None, max_length=1000)


class CounterOfferRequest(BaseModel):
    """Dealer counter-offer request schema."""

    new_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class BidResponse(TimestampMixin):
    """Bid or counter-offer record."""

    id: UUID
    job_id: UUID
    technician_id: UUID
    offered_price: Decimal
    message: Optional[str] = None
    status: BidStatus
    round_number: int
    is_counter_offer: bool
    previous_bid_id: Optional[UUID] = None
    responded_at: Optional[datetime] = None


class TechnicianSummarySchema(EntityResponse):
    """Bidding technician; contact details only for the paid assignee."""

    id: UUID
    full_name: Optional[str] = None
    rating: Optional[Decimal] = None
    place_name: Optional[str] = None
    service_radius_km: Optional[int] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    trust_score: Optional[Decimal] = None


class DealerBidResponse(EntityResponse):
    """Bid as listed to the job's dealer."""

    id: UUID
    job_id: UUID
    offered_price: Decimal
    status: str
    round_number: int
    is_counter_offer: bool
    previous_bid_id: Optional[UUID] = None
    message: Optional[str] = None
    created_at: datetime
    technician: TechnicianSummarySchema

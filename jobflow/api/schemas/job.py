"""
Job-related API schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from jobflow.domain.value_objects.job_status import JobStatus

from .common import EntityResponse, TimestampMixin


class LocationSchema(EntityResponse):
    """Job location schema."""

    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    place_name: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=10)


class CustomerSchema(EntityResponse):
    """End customer contact schema."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=255)


class JobCreateRequest(BaseModel):
    """Job creation request schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    location: LocationSchema
    customer: Optional[CustomerSchema] = None
    work_details: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    warranty_days: Optional[int] = Field(None, ge=0, le=3650)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title cannot be blank")
        return v.strip()


class AcceptJobRequest(BaseModel):
    """Direct acceptance request schema."""

    terms_accepted: bool = Field(
        False, description="Technician accepts the payment split and warranty terms"
    )


class ReasonRequest(BaseModel):
    """Optional free-text reason for cancellations and rejections."""

    reason: Optional[str] = Field(None, max_length=1000)


class JobResponse(TimestampMixin):
    """Full job as seen by its dealer or an admin."""

    id: UUID
    job_number: str
    title: str
    description: str
    status: JobStatus
    location: LocationSchema
    customer: Optional[CustomerSchema] = None
    work_details: Optional[str] = None
    amount: Optional[Decimal] = None
    warranty_days: Optional[int] = None
    dealer_id: UUID
    assigned_technician_id: Optional[UUID] = None
    final_price: Optional[Decimal] = None
    negotiation_rounds: int = 0
    payment_locked: bool = False
    payment_due_at: Optional[datetime] = None
    assigned_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completion_submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    version: int


class DealerSchema(EntityResponse):
    """Dealer as shown to a technician."""

    trust_score: Optional[Decimal] = None
    rating: Optional[Decimal] = None
    business_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class CounterOfferSchema(EntityResponse):
    """Counter-offer waiting on the viewing technician."""

    id: UUID
    bid_id: UUID
    offered_price: Decimal
    round_number: int
    created_at: datetime


class TechnicianJobResponse(EntityResponse):
    """Job as shown to a technician; private fields stay empty until payment is locked."""

    id: UUID
    job_number: str
    title: str
    description: str
    status: str
    amount: Optional[Decimal] = None
    warranty_days: Optional[int] = None
    place_name: str
    city: str
    state: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    dealer: DealerSchema
    payment_locked: bool
    is_assigned_to_viewer: bool
    has_bid: bool
    my_bid_status: Optional[str] = None
    counter_offer: Optional[CounterOfferSchema] = None
    final_price: Optional[Decimal] = None
    work_details: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None

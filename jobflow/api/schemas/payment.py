"""
Payment, warranty and dispute API schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from jobflow.domain.value_objects.dispute_status import DisputeStatus
from jobflow.domain.value_objects.warranty_hold_status import (
    ReleaseOutcome,
    WarrantyHoldStatus,
)

from .common import EntityResponse
from .job import JobResponse


class PaymentIntentResponse(EntityResponse):
    """Gateway order the dealer pays against."""

    order_id: str
    amount: Decimal
    currency: str
    gateway: str
    receipt: Optional[str] = None
    key_id: Optional[str] = None


class WarrantyHoldResponse(EntityResponse):
    """Warranty hold state."""

    id: UUID
    amount: Decimal
    warranty_days: int
    status: WarrantyHoldStatus
    starts_at: datetime
    release_due_at: datetime
    effective_release_at: datetime
    released_at: Optional[datetime] = None
    forfeited_at: Optional[datetime] = None
    release_attempts: int = 0
    last_deferred_reason: Optional[str] = None


class PaymentSplitResponse(BaseModel):
    """Immediate and held parts of a job's payout."""

    job_id: UUID
    total_amount: Decimal
    immediate_release: Decimal
    warranty_hold: Decimal
    persisted: bool
    immediate_released_at: Optional[datetime] = None
    hold: Optional[WarrantyHoldResponse] = None


class CompletionResponse(BaseModel):
    """Approved job together with its payout split."""

    job: JobResponse
    split: PaymentSplitResponse


class ReleaseResponse(BaseModel):
    """Outcome of a warranty release attempt."""

    job_id: UUID
    outcome: ReleaseOutcome


class DisputeCreateRequest(BaseModel):
    """Dispute request schema."""

    reason: str = Field(..., min_length=1, max_length=2000)


class DisputeResolveRequest(BaseModel):
    """Dispute resolution request schema."""

    outcome: DisputeStatus
    note: Optional[str] = Field(None, max_length=2000)


class DisputeResponse(EntityResponse):
    """Dispute record."""

    id: UUID
    job_id: UUID
    raised_by: UUID
    reason: str
    status: DisputeStatus
    resolved_by: Optional[UUID] = None
    resolution_note: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime


class WebhookAck(BaseModel):
    """Acknowledgement returned to the payment gateway."""

    status: str
    job_id: Optional[UUID] = None

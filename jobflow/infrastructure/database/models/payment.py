"""
Payment split, warranty hold and payment release SQLAlchemy models.
"""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid

from jobflow.domain.value_objects.warranty_hold_status import WarrantyHoldStatus

from . import BaseModel
from .base import UTCDateTime


class PaymentSplitModel(BaseModel):
    """Payment split database model."""

    __tablename__ = "payment_splits"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, unique=True)
    technician_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    total_amount = Column(Numeric(precision=12, scale=2), nullable=False)
    immediate_release = Column(Numeric(precision=12, scale=2), nullable=False)
    warranty_hold = Column(Numeric(precision=12, scale=2), nullable=False)
    immediate_released_at = Column(UTCDateTime)


class WarrantyHoldModel(BaseModel):
    """Warranty hold database model."""

    __tablename__ = "warranty_holds"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, unique=True)
    technician_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    amount = Column(Numeric(precision=12, scale=2), nullable=False)
    warranty_days = Column(Integer, nullable=False)
    starts_at = Column(UTCDateTime, nullable=False)
    release_due_at = Column(UTCDateTime, nullable=False)
    effective_release_at = Column(UTCDateTime, nullable=False, index=True)
    status = Column(
        String(20), nullable=False, default=WarrantyHoldStatus.LOCKED.value, index=True
    )
    frozen_at = Column(UTCDateTime)
    paused_seconds = Column(Integer, nullable=False, default=0)
    released_at = Column(UTCDateTime)
    forfeited_at = Column(UTCDateTime)
    release_attempts = Column(Integer, nullable=False, default=0)
    last_deferred_reason = Column(Text)


class PaymentReleaseModel(BaseModel):
    """Payout ledger; one row per job and release kind."""

    __tablename__ = "payment_releases"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False)
    technician_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    kind = Column(String(20), nullable=False)
    amount = Column(Numeric(precision=12, scale=2), nullable=False)
    released_at = Column(UTCDateTime, nullable=False)

    __table_args__ = (UniqueConstraint("job_id", "kind", name="uq_payment_releases_job_kind"),)

"""
Job SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, Float, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from jobflow.domain.value_objects.job_status import JobStatus

from . import BaseModel
from .base import UTCDateTime


class JobModel(BaseModel):
    """Job database model."""

    __tablename__ = "jobs"

    job_number = Column(String(32), nullable=False, unique=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    work_details = Column(Text)
    amount = Column(Numeric(precision=12, scale=2))
    warranty_days = Column(Integer)

    # Location; address and pincode are private until payment is locked
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    place_name = Column(String(255))
    latitude = Column(Float)
    longitude = Column(Float)
    address = Column(Text)
    pincode = Column(String(10))

    # Customer contact info
    customer_name = Column(String(255))
    customer_phone = Column(String(20))
    customer_email = Column(String(255))

    dealer_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    status = Column(
        String(40), nullable=False, default=JobStatus.PENDING.value, index=True
    )
    assigned_technician_id = Column(Uuid(as_uuid=True), index=True)
    final_price = Column(Numeric(precision=12, scale=2))
    negotiation_rounds = Column(Integer, nullable=False, default=0)

    # Payment
    payment_locked = Column(Boolean, nullable=False, default=False)
    payment_order_id = Column(String(64))
    payment_reference = Column(String(64), unique=True)
    payment_due_at = Column(UTCDateTime)

    # Lifecycle timestamps
    assigned_at = Column(UTCDateTime)
    started_at = Column(UTCDateTime)
    completion_submitted_at = Column(UTCDateTime)
    completed_at = Column(UTCDateTime)
    cancelled_at = Column(UTCDateTime)
    cancellation_reason = Column(Text)

    # Optimistic concurrency
    version = Column(Integer, nullable=False, default=0)

    # Relationships
    bids = relationship("BidModel", back_populates="job", cascade="all, delete-orphan")

    __table_args__ = (Index("ix_jobs_status_payment_due_at", "status", "payment_due_at"),)

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, job_number={self.job_number}, status={self.status})>"

"""
Bid SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from jobflow.domain.value_objects.bid_status import BidStatus

from . import BaseModel
from .base import UTCDateTime


class BidModel(BaseModel):
    """Bid and counter-offer database model."""

    __tablename__ = "bids"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, index=True)
    technician_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    offered_price = Column(Numeric(precision=12, scale=2), nullable=False)
    message = Column(Text)
    status = Column(String(20), nullable=False, default=BidStatus.PENDING.value)
    round_number = Column(Integer, nullable=False, default=1)
    is_counter_offer = Column(Boolean, nullable=False, default=False)
    previous_bid_id = Column(Uuid(as_uuid=True), ForeignKey("bids.id"))
    responded_at = Column(UTCDateTime)

    # Relationships
    job = relationship("JobModel", back_populates="bids")

    __table_args__ = (Index("ix_bids_job_technician", "job_id", "technician_id"),)

    def __repr__(self) -> str:
        return f"<Bid(id={self.id}, job_id={self.job_id}, status={self.status})>"

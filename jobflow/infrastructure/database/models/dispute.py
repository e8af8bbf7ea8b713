"""
Dispute SQLAlchemy model.
"""

from sqlalchemy import Column, ForeignKey, String, Text, Uuid

from jobflow.domain.value_objects.dispute_status import DisputeStatus

from . import BaseModel
from .base import UTCDateTime


class DisputeModel(BaseModel):
    """Dispute database model."""

    __tablename__ = "disputes"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, index=True)
    raised_by = Column(Uuid(as_uuid=True), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(
        String(30), nullable=False, default=DisputeStatus.OPEN.value, index=True
    )
    resolved_by = Column(Uuid(as_uuid=True))
    resolution_note = Column(Text)
    resolved_at = Column(UTCDateTime)

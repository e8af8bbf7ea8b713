"""
Outbox event SQLAlchemy model.

Rows are written and read with plain SQL by ``TransactionalOutbox``; the model
exists so the table is part of the metadata.
"""

from sqlalchemy import JSON, Column, Index, Integer, String, Text, Uuid

from .base import Base, UTCDateTime, utcnow


class OutboxEventModel(Base):
    """Outbox event database model."""

    __tablename__ = "outbox_events"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    event_type = Column(String(50), nullable=False, index=True)
    aggregate_id = Column(String(64), nullable=False, index=True)
    event_data = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    retry_count = Column(Integer, nullable=False, default=0)
    max_retries = Column(Integer, nullable=False, default=3)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    processed_at = Column(UTCDateTime)
    error_message = Column(Text)

    __table_args__ = (Index("ix_outbox_events_status_created_at", "status", "created_at"),)

"""
Outbox of domain events written in the same transaction as the job state they describe.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Integer, String, Uuid, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.config.logging import get_logger

logger = get_logger(__name__)


class OutboxEventType(str, Enum):
    """Types of outbox events."""

    JOB_POSTED = "job.posted"
    BID_PLACED = "bid.placed"
    BID_COUNTERED = "bid.countered"
    BID_EXPIRED = "bid.expired"
    JOB_ASSIGNED = "job.assigned"
    JOB_COMPLETED = "job.completed"
    WARRANTY_RELEASED = "warranty.released"


class OutboxEventStatus(str, Enum):
    """Status of outbox events."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OutboxEvent:
    """Outbox event for transactional operations."""

    id: UUID
    event_type: OutboxEventType
    aggregate_id: str
    event_data: Dict[str, Any]
    status: OutboxEventStatus = OutboxEventStatus.PENDING
    retry_count: int = 0
    max_retries: int = 3
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    error_message: Optional[str] = None


def event_payload(event: Any) -> Dict[str, Any]:
    """Flatten a domain event dataclass into JSON-safe values."""
    payload = {}
    for key, value in asdict(event).items():
        if isinstance(value, (UUID, Decimal)):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        payload[key] = value
    return payload


_EVENT_COLUMNS = {
    "id": Uuid(),
    "event_type": String(),
    "aggregate_id": String(),
    "event_data": JSON(),
    "status": String(),
    "retry_count": Integer(),
    "max_retries": Integer(),
    "created_at": DateTime(timezone=True),
    "processed_at": DateTime(timezone=True),
    "error_message": String(),
}


def _typed(sql: str, *names: str):
    """Build a text() clause whose parameters carry column types."""
    return text(sql).bindparams(
        *[bindparam(name, type_=_EVENT_COLUMNS[name]) for name in names]
    )


_SELECT_EVENTS = """
    SELECT id, event_type, aggregate_id, event_data, status, retry_count,
           max_retries, created_at, processed_at, error_message
    FROM outbox_events
    WHERE status = :pending_status {event_type_filter}
    ORDER BY created_at ASC
    LIMIT :limit
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TransactionalOutbox:
    """
    Writes domain events into ``outbox_events`` alongside the state change
    that produced them, and tracks their delivery.

    ``record`` and ``create_event`` only flush, so the caller's commit
    decides whether the event exists. The delivery bookkeeping methods
    commit on their own because they run in the worker's session.
    """

    def __init__(self, db_session: AsyncSession, max_retries: int = 3):
        self.db_session = db_session
        self.max_retries = max_retries

    async def record(self, event: Any) -> OutboxEvent:
        """Queue a domain event for publication in the current transaction."""
        payload = event_payload(event)
        return await self.create_event(
            event_type=OutboxEventType(event.event_name),
            aggregate_id=payload.get("job_id") or str(uuid4()),
            event_data=payload,
            max_retries=self.max_retries,
        )

    async def create_event(
        self,
        event_type: OutboxEventType,
        aggregate_id: str,
        event_data: Dict[str, Any],
        max_retries: int = 3,
    ) -> OutboxEvent:
        event = OutboxEvent(
            id=uuid4(),
            event_type=event_type,
            aggregate_id=aggregate_id,
            event_data=event_data,
            max_retries=max_retries,
            created_at=_now(),
        )

        await self.db_session.execute(
            _typed(
                """
                INSERT INTO outbox_events (
                    id, event_type, aggregate_id, event_data, status,
                    retry_count, max_retries, created_at
                ) VALUES (
                    :id, :event_type, :aggregate_id, :event_data, :status,
                    :retry_count, :max_retries, :created_at
                )
                """,
                "id",
                "event_data",
                "created_at",
            ),
            {
                "id": event.id,
                "event_type": event.event_type.value,
                "aggregate_id": event.aggregate_id,
                "event_data": event.event_data,
                "status": event.status.value,
                "retry_count": event.retry_count,
                "max_retries": event.max_retries,
                "created_at": event.created_at,
            },
        )
        await self.db_session.flush()

        logger.info(
            "Outbox event queued",
            event_id=str(event.id),
            event_type=event.event_type.value,
            job_id=event.aggregate_id,
        )
        return event

    async def _transition(
        self,
        event_id: UUID,
        status: OutboxEventStatus,
        only_from: Optional[OutboxEventStatus] = None,
        error_message: Optional[str] = None,
        count_attempt: bool = False,
        stamp: bool = True,
    ) -> int:
        """Move one event to ``status`` and commit. Returns the affected row count."""
        assignments = ["status = :status"]
        params: Dict[str, Any] = {"id": event_id, "status": status.value}
        typed = ["id"]

        if stamp:
            assignments.append("processed_at = :processed_at")
            params["processed_at"] = _now()
            typed.append("processed_at")
        if error_message is not None:
            assignments.append("error_message = :error_message")
            params["error_message"] = error_message
        if count_attempt:
            assignments.append("retry_count = retry_count + 1")

        sql = f"UPDATE outbox_events SET {', '.join(assignments)} WHERE id = :id"
        if only_from is not None:
            sql += " AND status = :only_from"
            params["only_from"] = only_from.value

        stmt = text(sql).bindparams(
            *[bindparam(name, type_=_EVENT_COLUMNS[name]) for name in typed]
        )
        result = await self.db_session.execute(stmt, params)
        await self.db_session.commit()
        return result.rowcount

    async def mark_event_processing(self, event_id: UUID) -> bool:
        """Claim a pending event. ``False`` means another worker got it first."""
        claimed = await self._transition(
            event_id, OutboxEventStatus.PROCESSING, only_from=OutboxEventStatus.PENDING
        )
        return claimed > 0

    async def mark_event_completed(self, event_id: UUID) -> None:
        await self._transition(event_id, OutboxEventStatus.COMPLETED)

    async def release_event(self, event_id: UUID) -> None:
        """Put a claimed event back to pending without counting an attempt."""
        await self._transition(
            event_id,
            OutboxEventStatus.PENDING,
            only_from=OutboxEventStatus.PROCESSING,
            stamp=False,
        )

    async def mark_event_failed(self, event: OutboxEvent, error_message: str) -> bool:
        """
        Record a failed delivery.

        The event goes back to pending until it runs out of attempts, then it
        is parked as failed. Returns ``True`` if the event will be retried.
        """
        will_retry = event.retry_count + 1 < event.max_retries
        await self._transition(
            event.id,
            OutboxEventStatus.PENDING if will_retry else OutboxEventStatus.FAILED,
            error_message=error_message,
            count_attempt=True,
        )
        if not will_retry:
            logger.warning(
                "Outbox event parked after final attempt",
                event_id=str(event.id),
                event_type=event.event_type.value,
                attempts=event.retry_count + 1,
            )
        return will_retry

    async def get_pending_events(
        self, event_type: Optional[OutboxEventType] = None, limit: int = 100
    ) -> List[OutboxEvent]:
        """Oldest pending events first, optionally of a single type."""
        params: Dict[str, Any] = {
            "pending_status": OutboxEventStatus.PENDING.value,
            "limit": limit,
        }
        event_type_filter = ""
        if event_type:
            event_type_filter = "AND event_type = :event_type"
            params["event_type"] = event_type.value

        stmt = text(_SELECT_EVENTS.format(event_type_filter=event_type_filter)).columns(
            **_EVENT_COLUMNS
        )
        result = await self.db_session.execute(stmt, params)
        return [self._to_event(row) for row in result]

    @staticmethod
    def _to_event(row) -> OutboxEvent:
        return OutboxEvent(
            id=row.id,
            event_type=OutboxEventType(row.event_type),
            aggregate_id=row.aggregate_id,
            event_data=row.event_data or {},
            status=OutboxEventStatus(row.status),
            retry_count=row.retry_count,
            max_retries=row.max_retries,
            created_at=row.created_at,
            processed_at=row.processed_at,
            error_message=row.error_message,
        )

    async def cleanup_completed_events(self, days_old: int = 7) -> int:
        """Delete delivered events created more than ``days_old`` days ago."""
        stmt = text(
            "DELETE FROM outbox_events "
            "WHERE status = :completed_status AND created_at < :cutoff"
        ).bindparams(bindparam("cutoff", type_=_EVENT_COLUMNS["created_at"]))

        result = await self.db_session.execute(
            stmt,
            {
                "completed_status": OutboxEventStatus.COMPLETED.value,
                "cutoff": _now() - timedelta(days=days_old),
            },
        )
        await self.db_session.commit()

        logger.info(
            "Purged delivered outbox events",
            deleted_count=result.rowcount,
            days_old=days_old,
        )
        return result.rowcount

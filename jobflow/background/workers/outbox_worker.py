"""
Delivers outbox events to the notification publisher.
"""

import asyncio
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.gateways import NotificationPublisherInterface
from jobflow.application.services.retry_handler import CircuitOpenError, RetryHandler
from jobflow.application.services.transactional_outbox import (
    OutboxEvent,
    TransactionalOutbox,
)
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.infrastructure.monitoring.metrics import (
    record_outbox_event_processing,
    set_circuit_breaker_state,
)

logger = get_logger(__name__)

NOTIFICATIONS_OPERATION = "notifications"


class OutboxWorker:
    """Claims pending outbox events in batches and publishes each one."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        publisher: NotificationPublisherInterface,
        retry_handler: Optional[RetryHandler] = None,
        batch_size: int = settings.OUTBOX_BATCH_SIZE,
        max_retries: int = settings.OUTBOX_MAX_RETRIES,
        publish_retries: int = 2,
        publish_base_delay: float = 0.5,
    ):
        self.session_factory = session_factory
        self.publisher = publisher
        self.retry_handler = retry_handler or RetryHandler()
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.publish_retries = publish_retries
        self.publish_base_delay = publish_base_delay
        self.is_running = False
        self.processed_count = 0
        self.error_count = 0
        self.retry_count = 0

    async def process_pending_events(self) -> int:
        """Publish one batch of pending events. Returns how many were delivered."""
        session = self.session_factory()
        try:
            outbox = TransactionalOutbox(session, max_retries=self.max_retries)
            events = await outbox.get_pending_events(limit=self.batch_size)
            # Release the read transaction before publishing
            await session.commit()

            if not events:
                logger.debug("No pending outbox events")
                return 0

            processed_count = 0
            for event in events:
                if not await outbox.mark_event_processing(event.id):
                    # Another worker claimed it
                    continue

                if await self._deliver(outbox, event):
                    processed_count += 1

            logger.info(
                "Outbox event processing completed",
                total_events=len(events),
                processed_count=processed_count,
                total_processed=self.processed_count,
                total_errors=self.error_count,
            )
            return processed_count
        finally:
            await session.close()

    async def _deliver(self, outbox: TransactionalOutbox, event: OutboxEvent) -> bool:
        try:
            await self.retry_handler.execute_with_retry(
                lambda: self.publisher.publish(event.event_type.value, event.event_data),
                max_retries=self.publish_retries,
                base_delay=self.publish_base_delay,
                operation_key=NOTIFICATIONS_OPERATION,
            )
        except CircuitOpenError:
            # Requeue without spending one of the event's retries
            await outbox.release_event(event.id)
            set_circuit_breaker_state(NOTIFICATIONS_OPERATION, "open")
            logger.warning(
                "Notification circuit open, event deferred",
                event_id=str(event.id),
                event_type=event.event_type.value,
            )
            return False
        except Exception as e:
            will_retry = await outbox.mark_event_failed(event, str(e))
            self.error_count += 1
            if will_retry:
                self.retry_count += 1
            record_outbox_event_processing(
                event.event_type.value, "retry" if will_retry else "failed"
            )
            logger.error(
                "Outbox event delivery failed",
                event_id=str(event.id),
                event_type=event.event_type.value,
                retry_count=event.retry_count + 1,
                will_retry=will_retry,
                error=str(e),
            )
            return False

        await outbox.mark_event_completed(event.id)
        self.processed_count += 1
        record_outbox_event_processing(event.event_type.value, "completed")
        set_circuit_breaker_state(NOTIFICATIONS_OPERATION, "closed")
        return True

    async def start_continuous_processing(
        self, interval_seconds: int = settings.BACKGROUND_WORKER_OUTBOX_INTERVAL_SECONDS
    ):
        """Poll the outbox until ``stop_continuous_processing`` is called."""
        logger.info("Outbox worker started", interval_seconds=interval_seconds)
        self.is_running = True

        while self.is_running:
            try:
                await self.process_pending_events()
            except Exception as e:
                # A broken batch must not kill the poller
                logger.error("Outbox batch failed", error=str(e), exc_info=True)
            await asyncio.sleep(interval_seconds)

        logger.info("Outbox worker stopped", **self.get_stats())

    def stop_continuous_processing(self):
        self.is_running = False

    def get_stats(self) -> dict:
        attempts = self.processed_count + self.error_count
        return {
            "is_running": self.is_running,
            "total_processed": self.processed_count,
            "total_errors": self.error_count,
            "total_retries": self.retry_count,
            "success_rate": self.processed_count / attempts if attempts else 0,
            "notifications_circuit": self.retry_handler.get_circuit_breaker_status(
                NOTIFICATIONS_OPERATION
            ),
        }

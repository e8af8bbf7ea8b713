"""
In-process background workers started by the API lifespan.
"""

import asyncio
from typing import Any, Dict, Optional

from jobflow.background.workers.outbox_worker import OutboxWorker
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings

logger = get_logger(__name__)


class WorkerManager:
    """Runs the outbox worker as an asyncio task next to the API."""

    def __init__(self, outbox_worker: Optional[OutboxWorker] = None):
        self.outbox_worker = outbox_worker
        self.worker_tasks: Dict[str, asyncio.Task] = {}
        self.is_running = False

    def _build_outbox_worker(self) -> OutboxWorker:
        from jobflow.config.database import get_session_factory
        from jobflow.infrastructure.notifications import get_notification_publisher

        return OutboxWorker(
            session_factory=get_session_factory(),
            publisher=get_notification_publisher(),
        )

    async def start_all_workers(self):
        if self.outbox_worker is None:
            self.outbox_worker = self._build_outbox_worker()

        self.worker_tasks["outbox"] = asyncio.create_task(
            self.outbox_worker.start_continuous_processing(
                interval_seconds=settings.BACKGROUND_WORKER_OUTBOX_INTERVAL_SECONDS
            ),
            name="outbox-worker",
        )
        self.is_running = True
        logger.info("Background workers started", workers=sorted(self.worker_tasks))

    async def stop_all_workers(self):
        if self.outbox_worker:
            self.outbox_worker.stop_continuous_processing()

        tasks = [task for task in self.worker_tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        # Cancelled tasks surface CancelledError as a result, not an exception
        await asyncio.gather(*tasks, return_exceptions=True)

        self.worker_tasks.clear()
        self.is_running = False
        logger.info("Background workers stopped")

    def get_worker_stats(self) -> Dict[str, Any]:
        return {
            "manager": {
                "is_running": self.is_running,
                "active_workers": len(self.worker_tasks),
            },
            "outbox_worker": self.outbox_worker.get_stats() if self.outbox_worker else {},
        }


__all__ = ["OutboxWorker", "WorkerManager"]

"""
Periodic sweeps run by Celery beat.

- Warranty holds whose warranty period has run out are released.
- Assignments whose payment deadline passed are put back on the market.
- Bids and counter-offers nobody answered in time are expired.
- Delivered outbox events are purged.

Each task runs its coroutine in a fresh event loop with its own session, so
Celery's prefork workers never share a loop or a connection.
"""

import asyncio
import random
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from celery import current_app
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.use_cases.bidding import ExpireStaleBidsUseCase
from jobflow.application.use_cases.cancel_job import ExpireUnpaidAssignmentsUseCase
from jobflow.application.use_cases.warranty_release import (
    ReleaseDueWarrantyHoldsUseCase,
    ReleaseWarrantyHoldUseCase,
)
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.infrastructure.database.repositories.bid_repository import BidRepository
from jobflow.infrastructure.database.repositories.dispute_repository import (
    DisputeRepository,
)
from jobflow.infrastructure.database.repositories.job_repository import JobRepository
from jobflow.infrastructure.database.repositories.payment_repository import (
    PaymentRepository,
)
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import record_worker_task

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]


def run_async_in_new_loop(coro):
    """
    Run an async coroutine in a new event loop.

    Each Celery task gets its own loop so async engines are never shared
    between worker processes.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
        asyncio.set_event_loop(None)


async def _with_private_engine(sweep) -> Dict[str, Any]:
    from jobflow.config.database import get_async_session_factory

    # The engine is bound to this task's loop, so it lives and dies with it
    session_factory = get_async_session_factory()
    try:
        return await sweep(session_factory)
    finally:
        await session_factory.kw["bind"].dispose()


async def release_due_warranty_holds(
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
    limit: int = settings.WARRANTY_RELEASE_BATCH_SIZE,
) -> Dict[str, Any]:
    """Release every hold that is due and report what happened to each."""
    session = session_factory()
    try:
        payment_repo = PaymentRepository(session)
        release_use_case = ReleaseWarrantyHoldUseCase(
            job_repo=JobRepository(session),
            payment_repo=payment_repo,
            dispute_repo=DisputeRepository(session),
            outbox=TransactionalOutbox(session, max_retries=settings.OUTBOX_MAX_RETRIES),
            transaction_service=TransactionService(session),
        )
        sweep = ReleaseDueWarrantyHoldsUseCase(payment_repo, release_use_case)
        result = await sweep.execute(now=now, limit=limit)
        return {
            "status": "success",
            "total_processed": result.total_processed,
            "outcomes": result.outcomes,
            "errors": result.errors,
        }
    finally:
        await session.close()


async def expire_unpaid_assignments(
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
    limit: int = settings.PAYMENT_EXPIRY_BATCH_SIZE,
) -> Dict[str, Any]:
    """Re-open jobs whose dealer never paid."""
    session = session_factory()
    try:
        use_case = ExpireUnpaidAssignmentsUseCase(
            job_repo=JobRepository(session),
            transaction_service=TransactionService(session),
        )
        result = await use_case.execute(now=now, limit=limit)
        return {
            "status": "success",
            "total_processed": result.total_processed,
            "reopened": result.reopened,
            "skipped": result.skipped,
        }
    finally:
        await session.close()


async def expire_stale_bids(
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
    limit: int = settings.BID_EXPIRY_BATCH_SIZE,
) -> Dict[str, Any]:
    """Expire bids and counter-offers left unanswered."""
    session = session_factory()
    try:
        use_case = ExpireStaleBidsUseCase(
            bid_repo=BidRepository(session),
            outbox=TransactionalOutbox(session, max_retries=settings.OUTBOX_MAX_RETRIES),
            transaction_service=TransactionService(session),
        )
        result = await use_case.execute(now=now, limit=limit)
        return {
            "status": "success",
            "total_processed": result.total_processed,
            "expired": result.expired,
            "skipped": result.skipped,
        }
    finally:
        await session.close()


async def cleanup_outbox_events(
    session_factory: SessionFactory, days_old: int = settings.OUTBOX_RETENTION_DAYS
) -> Dict[str, Any]:
    session = session_factory()
    try:
        outbox = TransactionalOutbox(session)
        deleted = await outbox.cleanup_completed_events(days_old=days_old)
        return {"status": "success", "deleted": deleted}
    finally:
        await session.close()


def _run_sweep(task, task_type: str, sweep) -> Dict[str, Any]:
    """Run a sweep coroutine factory with the shared retry policy."""
    try:
        logger.info(
            "Starting periodic sweep",
            task_type=task_type,
            attempt=task.request.retries + 1,
        )
        result = run_async_in_new_loop(_with_private_engine(sweep))
        record_worker_task("celery", task_type, "success")
        logger.info("Periodic sweep completed", task_type=task_type, **result)
        return result

    except Exception as e:
        record_worker_task("celery", task_type, "error")
        logger.error(
            "Periodic sweep failed",
            task_type=task_type,
            error=str(e),
            error_type=type(e).__name__,
            attempt=task.request.retries + 1,
            max_retries=task.max_retries,
        )

        if task.request.retries < task.max_retries:
            delay = (2**task.request.retries) + (random.random() * 0.1)
            raise task.retry(exc=e, countdown=delay, max_retries=task.max_retries)

        return {
            "status": "failed_permanently",
            "reason": f"Failed after {task.max_retries} retries: {str(e)}",
        }


@current_app.task(bind=True, max_retries=2, name="release_due_warranty_holds_task")
def release_due_warranty_holds_task(self):
    """Release warranty holds whose release date has passed."""
    return _run_sweep(self, "warranty_release", release_due_warranty_holds)


@current_app.task(bind=True, max_retries=2, name="expire_unpaid_assignments_task")
def expire_unpaid_assignments_task(self):
    """Re-open assignments the dealer did not pay for in time."""
    return _run_sweep(self, "payment_expiry", expire_unpaid_assignments)


@current_app.task(bind=True, max_retries=2, name="expire_stale_bids_task")
def expire_stale_bids_task(self):
    """Expire bids the other party never answered."""
    return _run_sweep(self, "bid_expiry", expire_stale_bids)


@current_app.task(bind=True, max_retries=1, name="cleanup_outbox_events_task")
def cleanup_outbox_events_task(self):
    """Purge delivered outbox events."""
    return _run_sweep(self, "outbox_cleanup", cleanup_outbox_events)

"""
Celery application configuration and setup.
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from jobflow.config.logging import configure_logging
from jobflow.config.settings import settings

celery_app = Celery(
    "jobflow",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["jobflow.background.tasks.sweeps"],
)

celery_app.conf.update(
    task_routes={
        "release_due_warranty_holds_task": {"queue": "payments"},
        "expire_unpaid_assignments_task": {"queue": "payments"},
        "expire_stale_bids_task": {"queue": "default"},
        "cleanup_outbox_events_task": {"queue": "maintenance"},
    },
    # Worker configuration
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    worker_pool="prefork",
    worker_hijack_root_logger=False,
    # Task configuration
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=3600,
    task_default_queue="default",
    # Sweeps are idempotent, so redelivery after a crash is safe
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    beat_schedule={
        "release-due-warranty-holds": {
            "task": "release_due_warranty_holds_task",
            "schedule": float(settings.CELERY_WARRANTY_RELEASE_INTERVAL_SECONDS),
            "options": {"queue": "payments"},
        },
        "expire-unpaid-assignments": {
            "task": "expire_unpaid_assignments_task",
            "schedule": float(settings.CELERY_PAYMENT_EXPIRY_INTERVAL_SECONDS),
            "options": {"queue": "payments"},
        },
        "expire-stale-bids": {
            "task": "expire_stale_bids_task",
            "schedule": float(settings.CELERY_BID_EXPIRY_INTERVAL_SECONDS),
            "options": {"queue": "default"},
        },
        "cleanup-outbox-events": {
            "task": "cleanup_outbox_events_task",
            "schedule": crontab(
                minute=0,
                hour=f"*/{settings.CELERY_CLEANUP_OUTBOX_EVENTS_INTERVAL_HOURS}",
            ),
            "options": {"queue": "maintenance"},
        },
    },
)


@setup_logging.connect
def configure_worker_logging(loglevel=None, **kwargs):
    """Workers and beat log through structlog like the API does."""
    configure_logging(level=loglevel if isinstance(loglevel, str) else None)


if __name__ == "__main__":
    celery_app.start()

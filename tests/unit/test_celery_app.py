"""
Unit tests for the Celery application configuration.
"""

from unittest.mock import patch

from jobflow.background.celery_app import celery_app, configure_worker_logging


class TestCeleryApp:
    """Test cases for the Celery app and its beat schedule."""

    def test_beat_schedules_every_sweep(self):
        scheduled = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}

        assert scheduled == {
            "release_due_warranty_holds_task",
            "expire_unpaid_assignments_task",
            "expire_stale_bids_task",
            "cleanup_outbox_events_task",
        }

    def test_payment_sweeps_routed_to_payments_queue(self):
        routes = celery_app.conf.task_routes

        assert routes["release_due_warranty_holds_task"] == {"queue": "payments"}
        assert routes["expire_unpaid_assignments_task"] == {"queue": "payments"}

    def test_late_acknowledgement(self):
        assert celery_app.conf.task_acks_late is True
        assert celery_app.conf.worker_hijack_root_logger is False

    def test_worker_logging_uses_structlog_setup(self):
        with patch("jobflow.background.celery_app.configure_logging") as configure:
            configure_worker_logging(loglevel="DEBUG")
            configure_worker_logging(loglevel=10)

        assert [c.kwargs for c in configure.call_args_list] == [
            {"level": "DEBUG"},
            {"level": None},
        ]

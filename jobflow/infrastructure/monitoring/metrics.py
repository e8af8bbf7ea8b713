"""
Prometheus metrics for system monitoring.
"""

import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    multiprocess,
)

from jobflow.config.logging import get_logger

logger = get_logger(__name__)

registry = CollectorRegistry()
prometheus_multiproc_dir = os.getenv("PROMETHEUS_MULTIPROC_DIR")

# Gunicorn/Celery run several processes; aggregate through the shared dir
if prometheus_multiproc_dir and os.path.isdir(prometheus_multiproc_dir):
    multiprocess.MultiProcessCollector(registry)


def get_registry() -> CollectorRegistry:
    """Get the registry all job workflow metrics are registered in."""
    return registry


JOBS_POSTED = Counter(
    "jobs_posted_total",
    "Total number of jobs posted by dealers",
    registry=registry,
)

BIDS_PLACED = Counter(
    "bids_placed_total",
    "Total number of bids and counter-offers created",
    ["kind"],
    registry=registry,
)

BIDS_EXPIRED = Counter(
    "bids_expired_total",
    "Total number of bids and counter-offers closed unanswered",
    ["kind"],
    registry=registry,
)

JOB_ASSIGNMENTS = Counter(
    "job_assignments_total",
    "Total number of jobs assigned to a technician",
    ["path"],
    registry=registry,
)

ASSIGNMENT_RACES_LOST = Counter(
    "job_assignment_races_lost_total",
    "Assignment attempts that lost to a concurrent winner",
    ["path"],
    registry=registry,
)

JOB_TRANSITIONS = Counter(
    "job_status_transitions_total",
    "Job status transitions",
    ["to_status"],
    registry=registry,
)

PAYMENTS_CAPTURED = Counter(
    "payments_captured_total",
    "Payment capture webhooks processed",
    ["result"],
    registry=registry,
)

WARRANTY_RELEASES = Counter(
    "warranty_release_attempts_total",
    "Warranty release attempts by outcome",
    ["outcome"],
    registry=registry,
)

OUTBOX_EVENTS = Counter(
    "outbox_events_processed_total",
    "Outbox events processed by the publisher",
    ["event_type", "status"],
    registry=registry,
)

WORKER_TASKS_PROCESSED = Counter(
    "worker_tasks_processed_total",
    "Total number of tasks processed by workers",
    ["worker_type", "task_type", "status"],
    registry=registry,
)

ACTIVE_WORKERS = Gauge(
    "active_workers",
    "Number of currently active workers",
    ["worker_type"],
    registry=registry,
)

API_REQUESTS = Counter(
    "api_requests_total",
    "Total number of API requests",
    ["method", "endpoint", "status_code"],
    registry=registry,
)

API_REQUEST_DURATION = Histogram(
    "api_request_duration_seconds",
    "Time spent processing API requests",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
    registry=registry,
)

ERRORS_TOTAL = Counter(
    "errors_total",
    "Total number of errors",
    ["error_type", "component"],
    registry=registry,
)

CIRCUIT_BREAKER_STATE = Gauge(
    "circuit_breaker_state",
    "Current state of circuit breaker",
    ["operation"],
    registry=registry,
)


def record_job_posted() -> None:
    JOBS_POSTED.inc()


def record_bid(kind: str) -> None:
    """Record a bid; ``kind`` is ``bid`` or ``counter_offer``."""
    BIDS_PLACED.labels(kind=kind).inc()


def record_bid_expired(kind: str) -> None:
    BIDS_EXPIRED.labels(kind=kind).inc()


def record_assignment(path: str) -> None:
    JOB_ASSIGNMENTS.labels(path=path).inc()


def record_assignment_race_lost(path: str) -> None:
    ASSIGNMENT_RACES_LOST.labels(path=path).inc()


def record_transition(to_status: str) -> None:
    JOB_TRANSITIONS.labels(to_status=to_status).inc()


def record_payment_capture(result: str) -> None:
    PAYMENTS_CAPTURED.labels(result=result).inc()


def record_warranty_release(outcome: str) -> None:
    WARRANTY_RELEASES.labels(outcome=outcome).inc()


def record_outbox_event_processing(event_type: str, status: str) -> None:
    """Record outbox event processing metric."""
    OUTBOX_EVENTS.labels(event_type=event_type, status=status).inc()


def record_worker_task(worker_type: str, task_type: str, status: str) -> None:
    """Record worker task processing metric."""
    WORKER_TASKS_PROCESSED.labels(
        worker_type=worker_type, task_type=task_type, status=status
    ).inc()


def record_api_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    API_REQUESTS.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
    API_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


def record_error(error_type: str, component: str) -> None:
    """Record error metric."""
    ERRORS_TOTAL.labels(error_type=error_type, component=component).inc()


def set_circuit_breaker_state(operation: str, state: str) -> None:
    """Set circuit breaker state metric."""
    state_value = {"closed": 0, "half_open": 1, "open": 2}.get(state, 0)
    CIRCUIT_BREAKER_STATE.labels(operation=operation).set(state_value)


def set_worker_count(worker_type: str, count: int) -> None:
    """Set active worker count metric."""
    ACTIVE_WORKERS.labels(worker_type=worker_type).set(count)


def get_metrics() -> bytes:
    """Get all metrics in Prometheus format."""
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    """Get the content type for metrics."""
    return CONTENT_TYPE_LATEST

"""
Job state machine.

All job status transitions go through this module. Entities call
``ensure_transition`` before mutating their status and use cases call
``ensure_operation_allowed`` before doing any work, so the allowed
lifecycle lives in exactly one table.
"""

from typing import Dict, FrozenSet, List

from jobflow.domain.exceptions.workflow_error import (
    InvalidStateError,
    InvalidTransitionError,
)
from jobflow.domain.value_objects.job_status import JobStatus

VALID_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset(
        {JobStatus.WAITING_FOR_PAYMENT, JobStatus.ASSIGNED, JobStatus.CANCELLED}
    ),
    JobStatus.WAITING_FOR_PAYMENT: frozenset(
        {
            JobStatus.ASSIGNED,
            JobStatus.PENDING,  # payment deadline expired
            JobStatus.CANCELLED,
        }
    ),
    JobStatus.ASSIGNED: frozenset({JobStatus.IN_PROGRESS, JobStatus.CANCELLED}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETION_PENDING_APPROVAL}),
    JobStatus.COMPLETION_PENDING_APPROVAL: frozenset(
        {
            JobStatus.COMPLETED,
            JobStatus.IN_PROGRESS,  # dealer rejected the completion
        }
    ),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}

# Statuses each workflow operation may start from
OPERATION_STATES: Dict[str, FrozenSet[JobStatus]] = {
    "bid": frozenset({JobStatus.PENDING}),
    "counter_offer": frozenset({JobStatus.PENDING}),
    "accept": frozenset({JobStatus.PENDING}),
    "accept_bid": frozenset({JobStatus.PENDING}),
    "lock_payment": frozenset({JobStatus.WAITING_FOR_PAYMENT, JobStatus.ASSIGNED}),
    "start": frozenset({JobStatus.ASSIGNED}),
    "complete": frozenset({JobStatus.IN_PROGRESS}),
    "approve": frozenset({JobStatus.COMPLETION_PENDING_APPROVAL}),
    "reject_completion": frozenset({JobStatus.COMPLETION_PENDING_APPROVAL}),
    "cancel": frozenset(
        {JobStatus.PENDING, JobStatus.WAITING_FOR_PAYMENT, JobStatus.ASSIGNED}
    ),
    "expire_payment": frozenset({JobStatus.WAITING_FOR_PAYMENT}),
}


def allowed_transitions(status: JobStatus) -> List[str]:
    """Return the statuses reachable from ``status`` in a stable order."""
    return sorted(target.value for target in VALID_TRANSITIONS[JobStatus(status)])


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    """Check if ``current -> target`` is a legal transition."""
    return JobStatus(target) in VALID_TRANSITIONS[JobStatus(current)]


def ensure_transition(current: JobStatus, target: JobStatus) -> None:
    """Raise ``InvalidTransitionError`` unless ``current -> target`` is legal."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            JobStatus(current).value,
            JobStatus(target).value,
            allowed_transitions(current),
        )


def ensure_operation_allowed(status: JobStatus, operation: str) -> None:
    """Raise ``InvalidStateError`` if ``operation`` cannot start from ``status``."""
    allowed = OPERATION_STATES[operation]
    status = JobStatus(status)
    if status not in allowed:
        expected = " or ".join(sorted(s.value for s in allowed))
        raise InvalidStateError(
            f"Cannot {operation.replace('_', ' ')} job in {status.value} state. "
            f"Job must be {expected}.",
            current_status=status.value,
        )

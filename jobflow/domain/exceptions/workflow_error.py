"""
Job workflow domain exceptions.

Every error carries a stable ``code`` so the API layer can render it without
inspecting the message.
"""


class JobWorkflowError(Exception):
    """Base exception for job workflow errors."""

    code = "workflow_error"

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__.strip()
        super().__init__(self.message)


class NotFoundError(JobWorkflowError):
    """Requested resource was not found."""

    code = "not_found"

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class ForbiddenError(JobWorkflowError):
    """Caller lacks the role or ownership required for this operation."""

    code = "forbidden"


class InvalidStateError(JobWorkflowError):
    """Operation is not valid for the current status."""

    code = "invalid_state"

    def __init__(self, message: str, current_status: str = None):
        self.current_status = current_status
        super().__init__(message)


class InvalidTransitionError(InvalidStateError):
    """Raised when the job state machine refuses a transition."""

    def __init__(self, current_status: str, target_status: str, allowed: list):
        self.target_status = target_status
        self.allowed = allowed
        super().__init__(
            f"Invalid state transition from {current_status} to {target_status}. "
            f"Allowed transitions: {', '.join(allowed) or 'none'}",
            current_status=current_status,
        )


class DuplicateBidError(JobWorkflowError):
    """Technician already has an active bid on this job."""

    code = "duplicate_bid"

    def __init__(self, job_id, technician_id):
        self.job_id = job_id
        self.technician_id = technician_id
        super().__init__(
            f"Technician {technician_id} already has an active bid on job {job_id}"
        )


class RoundLimitError(JobWorkflowError):
    """Negotiation round limit reached."""

    code = "round_limit_reached"

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(f"Maximum negotiation rounds ({max_rounds}) reached")


class AlreadyAssignedError(JobWorkflowError):
    """Job was assigned to another technician first."""

    code = "already_assigned"

    def __init__(self, job_id):
        self.job_id = job_id
        super().__init__(f"Job {job_id} is no longer available for assignment")


class TermsNotAcceptedError(JobWorkflowError):
    """Payment split and warranty terms must be accepted first."""

    code = "terms_not_accepted"


class ConcurrentModificationError(InvalidStateError):
    """Record changed between read and write.

    Callers see it as an invalid state: reload and retry.
    """

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource} {resource_id} was modified concurrently; reload and retry"
        )


class InternalError(JobWorkflowError):
    """An unexpected error occurred."""

    code = "internal_error"

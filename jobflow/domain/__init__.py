"""
Domain package.
"""

from .entities import *
from .events import *
from .exceptions import *
from .value_objects import *

__all__ = [
    # Entities
    "Bid",
    "DealerProfile",
    "Dispute",
    "Job",
    "PaymentRelease",
    "PaymentSplit",
    "Technician",
    "WarrantyHold",
    "calculate_split",

    # Events
    "BidCountered",
    "BidExpired",
    "BidPlaced",
    "JobAssigned",
    "JobCompleted",
    "JobPosted",
    "WarrantyReleased",

    # Exceptions
    "AlreadyAssignedError",
    "ConcurrentModificationError",
    "DuplicateBidError",
    "ForbiddenError",
    "InternalError",
    "InvalidAmountError",
    "InvalidStateError",
    "InvalidTransitionError",
    "JobWorkflowError",
    "NotFoundError",
    "RequiredFieldError",
    "RoundLimitError",
    "TermsNotAcceptedError",
    "ValidationError",

    # Value Objects
    "Actor",
    "BidStatus",
    "CustomerContact",
    "DisputeStatus",
    "JobLocation",
    "JobStatus",
    "PaymentReleaseKind",
    "ReleaseOutcome",
    "Role",
    "WarrantyHoldStatus",
]

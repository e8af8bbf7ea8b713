"""
Domain exceptions package.
"""

from .gateway_error import (
    GatewayConfigurationError,
    GatewayError,
    NotificationDeliveryError,
    PaymentGatewayError,
)
from .validation_error import InvalidAmountError, RequiredFieldError, ValidationError
from .workflow_error import (
    AlreadyAssignedError,
    ConcurrentModificationError,
    DuplicateBidError,
    ForbiddenError,
    InternalError,
    InvalidStateError,
    InvalidTransitionError,
    JobWorkflowError,
    NotFoundError,
    RoundLimitError,
    TermsNotAcceptedError,
)

__all__ = [
    "AlreadyAssignedError",
    "ConcurrentModificationError",
    "DuplicateBidError",
    "ForbiddenError",
    "GatewayConfigurationError",
    "GatewayError",
    "InternalError",
    "InvalidAmountError",
    "InvalidStateError",
    "InvalidTransitionError",
    "JobWorkflowError",
    "NotFoundError",
    "NotificationDeliveryError",
    "PaymentGatewayError",
    "RequiredFieldError",
    "RoundLimitError",
    "TermsNotAcceptedError",
    "ValidationError",
]

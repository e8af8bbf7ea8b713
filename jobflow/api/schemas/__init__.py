"""
API schemas package.
"""

from .bid import (
    BidCreateRequest,
    BidResponse,
    CounterOfferRequest,
    DealerBidResponse,
)
from .common import ErrorResponse
from .job import (
    AcceptJobRequest,
    JobCreateRequest,
    JobResponse,
    ReasonRequest,
    TechnicianJobResponse,
)
from .payment import (
    CompletionResponse,
    DisputeCreateRequest,
    DisputeResolveRequest,
    DisputeResponse,
    PaymentIntentResponse,
    PaymentSplitResponse,
    ReleaseResponse,
    WebhookAck,
)

__all__ = [
    "AcceptJobRequest",
    "BidCreateRequest",
    "BidResponse",
    "CompletionResponse",
    "CounterOfferRequest",
    "DealerBidResponse",
    "DisputeCreateRequest",
    "DisputeResolveRequest",
    "DisputeResponse",
    "ErrorResponse",
    "JobCreateRequest",
    "JobResponse",
    "PaymentIntentResponse",
    "PaymentSplitResponse",
    "ReasonRequest",
    "ReleaseResponse",
    "TechnicianJobResponse",
    "WebhookAck",
]

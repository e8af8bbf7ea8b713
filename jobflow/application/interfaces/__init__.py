"""
Application interfaces package.
"""

from .gateways import (
    CapturedPayment,
    GatewayHealthStatus,
    NotificationPublisherInterface,
    PaymentGatewayInterface,
    PaymentIntent,
)
from .repositories import (
    BidRepositoryInterface,
    DealerProfileRepositoryInterface,
    DisputeRepositoryInterface,
    JobRepositoryInterface,
    PaymentRepositoryInterface,
    TechnicianRepositoryInterface,
)

__all__ = [
    "BidRepositoryInterface",
    "CapturedPayment",
    "DealerProfileRepositoryInterface",
    "DisputeRepositoryInterface",
    "GatewayHealthStatus",
    "JobRepositoryInterface",
    "NotificationPublisherInterface",
    "PaymentGatewayInterface",
    "PaymentIntent",
    "PaymentRepositoryInterface",
    "TechnicianRepositoryInterface",
]

"""
Application layer package.

This package contains use cases, services, and interfaces that implement
the job workflow on top of the domain model.
"""

from .interfaces.gateways import NotificationPublisherInterface, PaymentGatewayInterface
from .interfaces.repositories import (
    BidRepositoryInterface,
    DealerProfileRepositoryInterface,
    DisputeRepositoryInterface,
    JobRepositoryInterface,
    PaymentRepositoryInterface,
    TechnicianRepositoryInterface,
)

__all__ = [
    "BidRepositoryInterface",
    "DealerProfileRepositoryInterface",
    "DisputeRepositoryInterface",
    "JobRepositoryInterface",
    "NotificationPublisherInterface",
    "PaymentGatewayInterface",
    "PaymentRepositoryInterface",
    "TechnicianRepositoryInterface",
]

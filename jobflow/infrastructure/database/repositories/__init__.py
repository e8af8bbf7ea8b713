"""
Database repositories package.
"""

from .bid_repository import BidRepository
from .dealer_profile_repository import DealerProfileRepository
from .dispute_repository import DisputeRepository
from .job_repository import JobRepository
from .payment_repository import PaymentRepository
from .technician_repository import TechnicianRepository
from .transaction_repository import TransactionService

__all__ = [
    "BidRepository",
    "DealerProfileRepository",
    "DisputeRepository",
    "JobRepository",
    "PaymentRepository",
    "TechnicianRepository",
    "TransactionService",
]

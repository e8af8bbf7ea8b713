"""
Domain entities package.
"""

from .bid import Bid
from .dealer_profile import DealerProfile
from .dispute import Dispute
from .job import Job
from .payment_release import PaymentRelease
from .payment_split import PaymentSplit, calculate_split
from .technician import Technician
from .warranty_hold import WarrantyHold

__all__ = [
    "Bid",
    "DealerProfile",
    "Dispute",
    "Job",
    "PaymentRelease",
    "PaymentSplit",
    "Technician",
    "WarrantyHold",
    "calculate_split",
]

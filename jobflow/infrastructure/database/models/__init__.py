"""
Database models package.
"""

from .base import Base, BaseModel, UTCDateTime
from .bid import BidModel
from .dealer_profile import DealerProfileModel
from .dispute import DisputeModel
from .job import JobModel
from .outbox_event import OutboxEventModel
from .payment import PaymentReleaseModel, PaymentSplitModel, WarrantyHoldModel
from .technician import TechnicianModel

__all__ = [
    "Base",
    "BaseModel",
    "UTCDateTime",
    "BidModel",
    "DealerProfileModel",
    "DisputeModel",
    "JobModel",
    "OutboxEventModel",
    "PaymentReleaseModel",
    "PaymentSplitModel",
    "TechnicianModel",
    "WarrantyHoldModel",
]

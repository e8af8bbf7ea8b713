"""
Domain value objects package.
"""

from .actor import Actor, Role
from .bid_status import BidStatus
from .customer_contact import CustomerContact
from .dispute_status import DisputeStatus
from .job_status import JobStatus
from .location import JobLocation
from .warranty_hold_status import PaymentReleaseKind, ReleaseOutcome, WarrantyHoldStatus

__all__ = [
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

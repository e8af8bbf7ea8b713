"""
Domain events package.
"""

from .bid_events import BidCountered, BidExpired, BidPlaced
from .job_assigned import JobAssigned
from .job_completed import JobCompleted
from .job_posted import JobPosted
from .warranty_released import WarrantyReleased

__all__ = [
    "BidCountered",
    "BidExpired",
    "BidPlaced",
    "JobAssigned",
    "JobCompleted",
    "JobPosted",
    "WarrantyReleased",
]

"""
Dispute status value object.
"""

from enum import Enum


class DisputeStatus(str, Enum):
    """Dispute (complaint) status enumeration."""

    OPEN = "OPEN"
    RESOLVED_FOR_TECHNICIAN = "RESOLVED_FOR_TECHNICIAN"
    RESOLVED_FOR_DEALER = "RESOLVED_FOR_DEALER"

    def is_open(self) -> bool:
        return self == self.OPEN

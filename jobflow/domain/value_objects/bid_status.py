"""
Bid status value object.
"""

from enum import Enum


class BidStatus(str, Enum):
    """Bid and counter-offer status enumeration."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    COUNTERED = "COUNTERED"
    EXPIRED = "EXPIRED"

    def is_terminal(self) -> bool:
        """Check if status ends the negotiation for this chain."""
        return self in [self.ACCEPTED, self.REJECTED, self.EXPIRED]

    def is_active(self) -> bool:
        """Check if the bid is still part of a live negotiation."""
        return self in [self.PENDING, self.COUNTERED]

"""
Warranty hold status value objects.
"""

from enum import Enum


class WarrantyHoldStatus(str, Enum):
    """Warranty hold lifecycle status enumeration."""

    LOCKED = "LOCKED"
    FROZEN = "FROZEN"
    RELEASED = "RELEASED"
    FORFEITED = "FORFEITED"

    def is_final(self) -> bool:
        """Check if the held money has left the hold."""
        return self in [self.RELEASED, self.FORFEITED]


class ReleaseOutcome(str, Enum):
    """Result of a warranty release attempt."""

    RELEASED = "RELEASED"
    ALREADY_RELEASED = "ALREADY_RELEASED"
    DEFERRED_DISPUTE = "DEFERRED_DISPUTE"
    NOT_DUE = "NOT_DUE"
    FORFEITED = "FORFEITED"
    NO_HOLD = "NO_HOLD"

    @property
    def moved_funds(self) -> bool:
        return self == self.RELEASED


class PaymentReleaseKind(str, Enum):
    """Which portion of the split a payout belongs to."""

    IMMEDIATE = "IMMEDIATE"
    WARRANTY_HOLD = "WARRANTY_HOLD"

"""
Bid domain events.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass
class BidPlaced:
    """Event raised when a technician bids on a job."""

    event_name = "bid.placed"

    bid_id: UUID
    job_id: UUID
    technician_id: UUID
    offered_price: Decimal
    placed_at: datetime


@dataclass
class BidCountered:
    """Event raised when a dealer answers a bid with a counter-offer."""

    event_name = "bid.countered"

    bid_id: UUID
    counter_offer_id: UUID
    job_id: UUID
    technician_id: UUID
    offered_price: Decimal
    round_number: int
    countered_at: datetime


@dataclass
class BidExpired:
    """Event raised when a bid or counter-offer goes unanswered for too long."""

    event_name = "bid.expired"

    bid_id: UUID
    job_id: UUID
    technician_id: UUID
    is_counter_offer: bool
    expired_at: datetime

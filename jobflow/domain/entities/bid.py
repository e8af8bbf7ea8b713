"""Bid domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from jobflow.domain.exceptions.validation_error import InvalidAmountError
from jobflow.domain.exceptions.workflow_error import InvalidStateError, RoundLimitError
from jobflow.domain.value_objects.bid_status import BidStatus

DEFAULT_MAX_ROUNDS = 2


@dataclass
class Bid:
    """A technician's price offer on a job, or a dealer's counter to one.

    Counter-offers are stored as bids of their own, linked to the bid they
    answer through ``previous_bid_id``.
    """

    job_id: UUID
    technician_id: UUID
    offered_price: Decimal
    message: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    status: BidStatus = BidStatus.PENDING
    round_number: int = 1
    is_counter_offer: bool = False
    previous_bid_id: Optional[UUID] = None
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.offered_price, Decimal):
            self.offered_price = Decimal(str(self.offered_price))
        if self.offered_price <= 0:
            raise InvalidAmountError("offered_price", self.offered_price)
        if self.round_number < 1:
            raise ValueError("Round number starts at 1")
        if self.is_counter_offer and not self.previous_bid_id:
            raise ValueError("Counter-offer must reference the bid it answers")

        self.status = BidStatus(self.status)

        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = datetime.now(timezone.utc)

    @property
    def is_active(self) -> bool:
        return self.status.is_active()

    def _ensure_status(self, *allowed: BidStatus) -> None:
        if self.status not in allowed:
            expected = " or ".join(s.value for s in allowed)
            raise InvalidStateError(
                f"Bid {self.id} is {self.status.value}. Bid must be {expected}.",
                current_status=self.status.value,
            )

    def counter(
        self, new_price: Decimal, max_rounds: int = DEFAULT_MAX_ROUNDS
    ) -> "Bid":
        """Answer this bid with a new price.

        Marks this bid COUNTERED and returns the counter-offer record.
        """
        self._ensure_status(BidStatus.PENDING)

        next_round = self.round_number + 1
        if next_round > max_rounds:
            raise RoundLimitError(max_rounds)

        counter_offer = Bid(
            job_id=self.job_id,
            technician_id=self.technician_id,
            offered_price=new_price,
            round_number=next_round,
            is_counter_offer=True,
            previous_bid_id=self.id,
        )

        self.status = BidStatus.COUNTERED
        self.responded_at = datetime.now(timezone.utc)
        self.updated_at = self.responded_at
        return counter_offer

    def accept(self) -> None:
        self._ensure_status(BidStatus.PENDING, BidStatus.COUNTERED)
        self.status = BidStatus.ACCEPTED
        self.responded_at = datetime.now(timezone.utc)
        self.updated_at = self.responded_at

    def reject(self) -> None:
        self._ensure_status(BidStatus.PENDING, BidStatus.COUNTERED)
        self.status = BidStatus.REJECTED
        self.responded_at = datetime.now(timezone.utc)
        self.updated_at = self.responded_at

    def expire(self, now: Optional[datetime] = None) -> None:
        """Close a bid nobody answered in time.

        A PENDING bid expires when its answer never came; a COUNTERED bid
        expires along with the counter-offer that was never taken up.
        """
        self._ensure_status(BidStatus.PENDING, BidStatus.COUNTERED)
        self.status = BidStatus.EXPIRED
        self.responded_at = now or datetime.now(timezone.utc)
        self.updated_at = self.responded_at

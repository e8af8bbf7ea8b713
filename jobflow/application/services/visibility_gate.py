"""
Visibility gate.

Decides which job, dealer and technician fields each party may see. Until the
dealer's payment is captured a technician sees enough to price the work
(amount, warranty, coarse location, the dealer's reputation) but nothing that
identifies the customer or the dealer, and a dealer sees a bidder's name and
rating but not their contact details.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from jobflow.domain.entities.bid import Bid
from jobflow.domain.entities.dealer_profile import DealerProfile
from jobflow.domain.entities.job import Job
from jobflow.domain.entities.technician import Technician
from jobflow.domain.value_objects.bid_status import BidStatus


@dataclass
class CounterOfferView:
    """Dealer counter-offer waiting on the viewing technician."""

    id: UUID
    bid_id: UUID
    offered_price: Decimal
    round_number: int
    created_at: datetime


@dataclass
class DealerView:
    """Dealer as shown to a technician."""

    trust_score: Optional[Decimal]
    rating: Optional[Decimal]
    business_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class JobView:
    """Job as shown to a technician."""

    id: UUID
    job_number: str
    title: str
    description: str
    status: str
    amount: Optional[Decimal]
    warranty_days: Optional[int]
    place_name: str
    city: str
    state: str
    latitude: Optional[float]
    longitude: Optional[float]
    dealer: DealerView
    payment_locked: bool
    is_assigned_to_viewer: bool
    has_bid: bool
    my_bid_status: Optional[str] = None
    counter_offer: Optional[CounterOfferView] = None
    final_price: Optional[Decimal] = None
    # Revealed once payment is locked
    work_details: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None


@dataclass
class TechnicianView:
    """Bidding technician as shown to a dealer."""

    id: UUID
    full_name: Optional[str] = None
    rating: Optional[Decimal] = None
    place_name: Optional[str] = None
    service_radius_km: Optional[int] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    trust_score: Optional[Decimal] = None


@dataclass
class BidView:
    """Bid as shown to the dealer who owns the job."""

    id: UUID
    job_id: UUID
    offered_price: Decimal
    status: str
    round_number: int
    is_counter_offer: bool
    previous_bid_id: Optional[UUID]
    message: Optional[str]
    created_at: datetime
    technician: TechnicianView


class VisibilityGate:
    """Projects entities into role-specific views."""

    @staticmethod
    def reveals_to_technician(job: Job, technician_id: UUID) -> bool:
        """Check if private job details are visible to ``technician_id``."""
        return job.payment_locked and job.is_assigned_to(technician_id)

    def job_for_technician(
        self,
        job: Job,
        technician_id: UUID,
        dealer: Optional[DealerProfile] = None,
        viewer_bids: Optional[List[Bid]] = None,
    ) -> JobView:
        viewer_bids = viewer_bids or []
        revealed = self.reveals_to_technician(job, technician_id)

        own_bids = [bid for bid in viewer_bids if not bid.is_counter_offer]
        pending_counters = [
            bid
            for bid in viewer_bids
            if bid.is_counter_offer and bid.status == BidStatus.PENDING
        ]
        counter = pending_counters[-1] if pending_counters else None

        view = JobView(
            id=job.id,
            job_number=job.job_number,
            title=job.title,
            description=job.description,
            status=job.status.value,
            amount=job.amount,
            warranty_days=job.warranty_days,
            place_name=job.location.coarse_label,
            city=job.location.city,
            state=job.location.state,
            latitude=job.location.latitude,
            longitude=job.location.longitude,
            dealer=self._dealer_view(dealer, revealed),
            payment_locked=job.payment_locked,
            is_assigned_to_viewer=job.is_assigned_to(technician_id),
            has_bid=bool(own_bids),
            my_bid_status=own_bids[-1].status.value if own_bids else None,
            counter_offer=(
                CounterOfferView(
                    id=counter.id,
                    bid_id=counter.previous_bid_id,
                    offered_price=counter.offered_price,
                    round_number=counter.round_number,
                    created_at=counter.created_at,
                )
                if counter
                else None
            ),
            final_price=job.final_price if job.is_assigned_to(technician_id) else None,
        )

        if revealed:
            view.work_details = job.work_details
            view.address = job.location.address
            view.pincode = job.location.pincode
            if job.customer:
                view.customer_name = job.customer.name
                view.customer_phone = job.customer.phone
                view.customer_email = job.customer.email

        return view

    def bid_for_dealer(
        self, bid: Bid, job: Job, technician: Optional[Technician] = None
    ) -> BidView:
        revealed = job.payment_locked and job.is_assigned_to(bid.technician_id)

        return BidView(
            id=bid.id,
            job_id=bid.job_id,
            offered_price=bid.offered_price,
            status=bid.status.value,
            round_number=bid.round_number,
            is_counter_offer=bid.is_counter_offer,
            previous_bid_id=bid.previous_bid_id,
            message=bid.message,
            created_at=bid.created_at,
            technician=self._technician_view(bid.technician_id, technician, revealed),
        )

    @staticmethod
    def _dealer_view(dealer: Optional[DealerProfile], revealed: bool) -> DealerView:
        if dealer is None:
            return DealerView(trust_score=None, rating=None)

        view = DealerView(trust_score=dealer.trust_score, rating=dealer.rating)
        if revealed:
            view.business_name = dealer.business_name
            view.full_name = dealer.full_name
            view.email = dealer.email
            view.phone = dealer.phone
        return view

    @staticmethod
    def _technician_view(
        technician_id: UUID, technician: Optional[Technician], revealed: bool
    ) -> TechnicianView:
        if technician is None:
            return TechnicianView(id=technician_id)

        view = TechnicianView(
            id=technician.id,
            full_name=technician.full_name,
            rating=technician.rating,
            place_name=technician.place_name,
            service_radius_km=technician.service_radius_km,
        )
        if revealed:
            view.mobile = technician.mobile
            view.email = technician.email
            view.trust_score = technician.trust_score
        return view

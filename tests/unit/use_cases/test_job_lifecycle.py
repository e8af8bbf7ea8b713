"""
End-to-end job lifecycle through the use cases, plus the technician-facing queries.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from jobflow.domain.entities.dealer_profile import DealerProfile
from jobflow.domain.exceptions.workflow_error import ForbiddenError
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.warranty_hold_status import (
    PaymentReleaseKind,
    ReleaseOutcome,
)


class TestNegotiatedJobLifecycle:
    """Post, negotiate, pay, work, approve and release a warranty hold."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, workflow, dealer, technician):
        job = await workflow.posted(dealer, amount=Decimal("10000"), warranty_days=30)

        bid = await workflow.place_bid.execute(job.id, technician, Decimal("9500"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("9800"))
        assigned = await workflow.accept_counter.execute(counter.id, technician)
        assert assigned.status == JobStatus.ASSIGNED
        assert assigned.final_price == Decimal("9800")

        # Private details stay hidden until the dealer pays
        view = await workflow.job_detail.execute(job.id, technician.user_id)
        assert view.address is None
        assert view.customer_name is None

        intent = await workflow.payment_intent.execute(job.id, dealer)
        assert intent.amount == Decimal("9800")
        await workflow.payment_captured.execute(job.id, "pay_9800", amount=intent.amount)

        view = await workflow.job_detail.execute(job.id, technician.user_id)
        assert view.address == "12 100 Feet Road"
        assert view.pincode == "560038"
        assert view.customer_name == "Priya Nair"
        assert view.work_details == "Check refrigerant, clean coils"

        await workflow.start.execute(job.id, technician)
        await workflow.submit_completion.execute(job.id, technician)
        result = await workflow.approve.execute(job.id, dealer)

        assert result.job.status == JobStatus.COMPLETED
        assert result.split.immediate_release == Decimal("7840")
        assert result.split.warranty_hold == Decimal("1960")

        hold = workflow.payments.holds[job.id]
        assert hold.release_due_at == result.job.completed_at + timedelta(days=30)

        early = await workflow.release.execute(job.id, now=hold.release_due_at - timedelta(days=1))
        assert early == ReleaseOutcome.NOT_DUE

        released = await workflow.release.execute(job.id, now=hold.release_due_at)
        assert released == ReleaseOutcome.RELEASED

        payouts = workflow.payments.releases
        assert payouts[(job.id, PaymentReleaseKind.IMMEDIATE)].amount == Decimal("7840")
        assert payouts[(job.id, PaymentReleaseKind.WARRANTY_HOLD)].amount == Decimal("1960")

        assert workflow.outbox.names() == [
            "job.posted",
            "bid.placed",
            "bid.countered",
            "job.assigned",
            "job.completed",
            "warranty.released",
        ]

        stored = await workflow.stored_job(job.id)
        assert stored.has_consistent_assignment()
        assert workflow.bids.bids[bid.id].status == BidStatus.ACCEPTED
        assert workflow.bids.bids[counter.id].status == BidStatus.ACCEPTED


class TestTechnicianQueries:
    """Test cases for the technician-facing job queries."""

    @pytest.mark.asyncio
    async def test_open_jobs_listing(self, workflow, dealer, technician, other_technician):
        open_job = await workflow.posted(dealer, title="Washing machine drum")
        taken = await workflow.posted(dealer, title="Microwave sparks")
        await workflow.accept_direct.execute(taken.id, other_technician)

        views = await workflow.open_jobs.execute(technician)

        assert [view.id for view in views] == [open_job.id]
        assert views[0].address is None

    @pytest.mark.asyncio
    async def test_dealers_cannot_list_open_jobs(self, workflow, dealer):
        with pytest.raises(ForbiddenError):
            await workflow.open_jobs.execute(dealer)

    @pytest.mark.asyncio
    async def test_dealer_reputation_visible_before_payment(
        self, workflow, dealer, technician
    ):
        await workflow.dealers.create(
            DealerProfile(
                user_id=dealer.user_id,
                business_name="CoolAir Services",
                phone="+919800000002",
                trust_score=Decimal("88.00"),
                rating=Decimal("4.30"),
            )
        )
        job = await workflow.posted(dealer, amount=Decimal("1500"))

        view = await workflow.job_detail.execute(job.id, technician.user_id)

        assert view.dealer.trust_score == Decimal("88.00")
        assert view.dealer.rating == Decimal("4.30")
        assert view.dealer.business_name is None
        assert view.dealer.phone is None

    @pytest.mark.asyncio
    async def test_counter_offer_shown_to_its_technician(
        self, workflow, dealer, technician, other_technician
    ):
        job = await workflow.posted(dealer, amount=Decimal("1500"))
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("1400"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("1450"))

        mine = await workflow.job_detail.execute(job.id, technician.user_id)
        theirs = await workflow.job_detail.execute(job.id, other_technician.user_id)

        assert mine.counter_offer.id == counter.id
        assert mine.my_bid_status == "COUNTERED"
        assert theirs.counter_offer is None
        assert theirs.has_bid is False

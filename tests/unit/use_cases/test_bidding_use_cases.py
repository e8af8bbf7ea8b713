"""
Unit tests for bidding, counter-offer and bid acceptance use cases.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from jobflow.domain.exceptions.validation_error import InvalidAmountError
from jobflow.domain.exceptions.workflow_error import (
    AlreadyAssignedError,
    DuplicateBidError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    RoundLimitError,
)
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.domain.value_objects.job_status import JobStatus


class TestPlaceBidUseCase:
    """Test cases for PlaceBidUseCase."""

    @pytest.mark.asyncio
    async def test_place_bid_success(self, workflow, dealer, technician):
        """Test a technician bidding on an open job."""
        job = await workflow.posted(dealer, amount=Decimal("10000"))

        bid = await workflow.place_bid.execute(
            job.id, technician, Decimal("9500"), message="Can start tomorrow"
        )

        assert bid.status == BidStatus.PENDING
        assert bid.round_number == 1
        assert bid.technician_id == technician.user_id
        assert bid.offered_price == Decimal("9500")
        assert workflow.outbox.names() == ["job.posted", "bid.placed"]

    @pytest.mark.asyncio
    async def test_duplicate_active_bid_rejected(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        with pytest.raises(DuplicateBidError) as exc_info:
            await workflow.place_bid.execute(job.id, technician, Decimal("850"))

        assert exc_info.value.code == "duplicate_bid"
        assert len(workflow.bids.bids) == 1

    @pytest.mark.asyncio
    async def test_can_bid_again_after_rejection(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        first = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        await workflow.reject_bid.execute(first.id, dealer)

        second = await workflow.place_bid.execute(job.id, technician, Decimal("800"))

        assert second.status == BidStatus.PENDING
        assert workflow.bids.bids[first.id].status == BidStatus.REJECTED

    @pytest.mark.asyncio
    async def test_bid_on_assigned_job_rejected(
        self, workflow, dealer, technician, other_technician
    ):
        job = await workflow.posted(dealer)
        await workflow.accept_direct.execute(job.id, technician)

        with pytest.raises(InvalidStateError) as exc_info:
            await workflow.place_bid.execute(job.id, other_technician, Decimal("500"))

        assert exc_info.value.current_status == "ASSIGNED"

    @pytest.mark.asyncio
    async def test_non_positive_price_rejected(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)

        with pytest.raises(InvalidAmountError):
            await workflow.place_bid.execute(job.id, technician, Decimal("0"))

    @pytest.mark.asyncio
    async def test_dealers_cannot_bid(self, workflow, dealer, other_dealer):
        job = await workflow.posted(dealer)

        with pytest.raises(ForbiddenError):
            await workflow.place_bid.execute(job.id, other_dealer, Decimal("500"))

    @pytest.mark.asyncio
    async def test_unknown_job(self, workflow, technician):
        with pytest.raises(NotFoundError):
            await workflow.place_bid.execute(uuid4(), technician, Decimal("500"))


class TestCounterOfferUseCase:
    """Test cases for counter-offers and the round limit."""

    @pytest.mark.asyncio
    async def test_counter_offer_success(self, workflow, dealer, technician):
        job = await workflow.posted(dealer, amount=Decimal("10000"))
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("9500"))

        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("9800"))

        assert counter.is_counter_offer is True
        assert counter.previous_bid_id == bid.id
        assert counter.round_number == 2
        assert workflow.bids.bids[bid.id].status == BidStatus.COUNTERED
        stored = await workflow.stored_job(job.id)
        assert stored.negotiation_rounds == 2
        assert stored.status == JobStatus.PENDING
        assert workflow.outbox.names()[-1] == "bid.countered"

    @pytest.mark.asyncio
    async def test_round_limit_reached(self, workflow, dealer, technician):
        """Countering past the configured number of rounds is refused."""
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        with pytest.raises(RoundLimitError) as exc_info:
            await workflow.counter_offer.execute(counter.id, dealer, Decimal("940"))

        assert exc_info.value.max_rounds == 2
        assert exc_info.value.code == "round_limit_reached"

    @pytest.mark.asyncio
    async def test_single_round_forbids_any_counter(self, make_workflow, dealer, technician):
        workflow = make_workflow(max_rounds=1)
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        with pytest.raises(RoundLimitError):
            await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        assert workflow.bids.bids[bid.id].status == BidStatus.PENDING

    @pytest.mark.asyncio
    async def test_dealer_cannot_counter_own_counter(self, make_workflow, dealer, technician):
        workflow = make_workflow(max_rounds=5)
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        with pytest.raises(InvalidStateError):
            await workflow.counter_offer.execute(counter.id, dealer, Decimal("940"))

    @pytest.mark.asyncio
    async def test_only_owner_can_counter(self, workflow, dealer, other_dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        with pytest.raises(ForbiddenError):
            await workflow.counter_offer.execute(bid.id, other_dealer, Decimal("950"))

    @pytest.mark.asyncio
    async def test_admin_can_counter_any_job(self, workflow, dealer, admin, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        counter = await workflow.counter_offer.execute(bid.id, admin, Decimal("950"))

        assert counter.offered_price == Decimal("950")


class TestCounterOfferResponse:
    """Test the technician's answer to a counter-offer."""

    @pytest.mark.asyncio
    async def test_accept_counter_assigns_at_counter_price(
        self, workflow, dealer, technician, other_technician
    ):
        job = await workflow.posted(dealer, amount=Decimal("10000"))
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("9500"))
        rival = await workflow.place_bid.execute(job.id, other_technician, Decimal("9700"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("9800"))

        assigned = await workflow.accept_counter.execute(counter.id, technician)

        assert assigned.status == JobStatus.ASSIGNED
        assert assigned.assigned_technician_id == technician.user_id
        assert assigned.final_price == Decimal("9800")
        assert assigned.agreed_price == Decimal("9800")
        assert assigned.payment_locked is False

        assert workflow.bids.bids[counter.id].status == BidStatus.ACCEPTED
        assert workflow.bids.bids[bid.id].status == BidStatus.ACCEPTED
        assert workflow.bids.bids[rival.id].status == BidStatus.REJECTED
        assert workflow.outbox.names()[-1] == "job.assigned"

    @pytest.mark.asyncio
    async def test_counter_addressed_to_someone_else(
        self, workflow, dealer, technician, other_technician
    ):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        with pytest.raises(ForbiddenError):
            await workflow.accept_counter.execute(counter.id, other_technician)

    @pytest.mark.asyncio
    async def test_plain_bid_is_not_a_counter_offer(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        with pytest.raises(NotFoundError):
            await workflow.accept_counter.execute(bid.id, technician)

    @pytest.mark.asyncio
    async def test_reject_counter_ends_negotiation(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        rejected = await workflow.reject_counter.execute(counter.id, technician)

        assert rejected.status == BidStatus.REJECTED
        assert workflow.bids.bids[bid.id].status == BidStatus.REJECTED
        stored = await workflow.stored_job(job.id)
        assert stored.status == JobStatus.PENDING

        with pytest.raises(InvalidStateError):
            await workflow.accept_counter.execute(counter.id, technician)


class TestAcceptBidUseCase:
    """Test cases for the dealer accepting and rejecting bids."""

    @pytest.mark.asyncio
    async def test_accept_bid(self, workflow, dealer, technician, other_technician):
        job = await workflow.posted(dealer, amount=Decimal("2000"))
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("1800"))
        other = await workflow.place_bid.execute(job.id, other_technician, Decimal("1900"))

        assigned = await workflow.accept_bid.execute(bid.id, dealer)

        assert assigned.status == JobStatus.ASSIGNED
        assert assigned.final_price == Decimal("1800")
        assert workflow.bids.bids[bid.id].status == BidStatus.ACCEPTED
        assert workflow.bids.bids[other.id].status == BidStatus.REJECTED

    @pytest.mark.asyncio
    async def test_countered_bid_cannot_be_accepted_by_dealer(
        self, workflow, dealer, technician
    ):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        with pytest.raises(InvalidStateError):
            await workflow.accept_bid.execute(bid.id, dealer)

    @pytest.mark.asyncio
    async def test_concurrent_bid_acceptance_assigns_once(
        self, workflow, dealer, technician, other_technician
    ):
        """Two bids accepted at once: exactly one technician wins the job."""
        job = await workflow.posted(dealer)
        first = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        second = await workflow.place_bid.execute(job.id, other_technician, Decimal("950"))

        results = await asyncio.gather(
            workflow.accept_bid.execute(first.id, dealer),
            workflow.accept_bid.execute(second.id, dealer),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], AlreadyAssignedError)

        stored = await workflow.stored_job(job.id)
        assert stored.assigned_technician_id == winners[0].assigned_technician_id
        accepted = [b for b in workflow.bids.bids.values() if b.status == BidStatus.ACCEPTED]
        assert len(accepted) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("accept_first", [True, False])
    async def test_bid_racing_acceptance_never_stays_open(
        self, workflow, dealer, technician, other_technician, accept_first
    ):
        """A bid placed while another is being accepted ends up rejected or refused."""
        job = await workflow.posted(dealer)
        first = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        store_bid = workflow.bids.create

        async def slow_create(bid):
            await asyncio.sleep(0)
            return await store_bid(bid)

        workflow.bids.create = slow_create

        accept = workflow.accept_bid.execute(first.id, dealer)
        late_bid = workflow.place_bid.execute(job.id, other_technician, Decimal("800"))
        calls = [accept, late_bid] if accept_first else [late_bid, accept]
        results = await asyncio.gather(*calls, return_exceptions=True)

        for result in results:
            if isinstance(result, Exception):
                assert isinstance(result, InvalidStateError)

        stored = await workflow.stored_job(job.id)
        open_bids = [
            b for b in workflow.bids.bids.values() if b.status == BidStatus.PENDING
        ]
        if stored.status == JobStatus.ASSIGNED:
            assert open_bids == []
        else:
            assert stored.status == JobStatus.PENDING
            assert stored.assigned_technician_id is None

    @pytest.mark.asyncio
    async def test_reject_bid(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        rejected = await workflow.reject_bid.execute(bid.id, dealer)

        assert rejected.status == BidStatus.REJECTED
        with pytest.raises(InvalidStateError):
            await workflow.reject_bid.execute(bid.id, dealer)

    @pytest.mark.asyncio
    async def test_job_bids_listing_for_owner(
        self, workflow, dealer, other_dealer, technician
    ):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        views = await workflow.job_bids.execute(job.id, dealer)

        assert [view.id for view in views] == [bid.id]
        assert views[0].technician.id == technician.user_id
        assert views[0].technician.mobile is None

        with pytest.raises(ForbiddenError):
            await workflow.job_bids.execute(job.id, other_dealer)


class TestExpireStaleBidsUseCase:
    """Test cases for the bid expiry sweep."""

    @pytest.mark.asyncio
    async def test_unanswered_bid_expires(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        result = await workflow.expire_bids.execute(now=bid.created_at + timedelta(hours=25))

        assert (result.total_processed, result.expired, result.skipped) == (1, 1, 0)
        assert workflow.bids.bids[bid.id].status == BidStatus.EXPIRED
        assert workflow.outbox.names()[-1] == "bid.expired"
        stored = await workflow.stored_job(job.id)
        assert stored.status == JobStatus.PENDING

        again = await workflow.place_bid.execute(job.id, technician, Decimal("850"))
        assert again.status == BidStatus.PENDING

    @pytest.mark.asyncio
    async def test_recent_bids_left_alone(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))

        result = await workflow.expire_bids.execute(now=bid.created_at + timedelta(hours=23))

        assert result.total_processed == 0
        assert workflow.bids.bids[bid.id].status == BidStatus.PENDING

    @pytest.mark.asyncio
    async def test_expired_counter_closes_the_negotiation(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        counter = await workflow.counter_offer.execute(bid.id, dealer, Decimal("950"))

        result = await workflow.expire_bids.execute(
            now=counter.created_at + timedelta(hours=25)
        )

        assert result.expired == 1
        assert workflow.bids.bids[counter.id].status == BidStatus.EXPIRED
        assert workflow.bids.bids[bid.id].status == BidStatus.EXPIRED
        with pytest.raises(InvalidStateError):
            await workflow.accept_counter.execute(counter.id, technician)

    @pytest.mark.asyncio
    async def test_bid_answered_during_sweep_is_skipped(self, workflow, dealer, technician):
        job = await workflow.posted(dealer)
        bid = await workflow.place_bid.execute(job.id, technician, Decimal("900"))
        find_expired = workflow.bids.find_expired_pending

        async def find_then_answer(cutoff, limit=100):
            stale = await find_expired(cutoff, limit)
            await workflow.reject_bid.execute(bid.id, dealer)
            return stale

        workflow.bids.find_expired_pending = find_then_answer
        result = await workflow.expire_bids.execute(now=bid.created_at + timedelta(hours=25))

        assert (result.total_processed, result.expired, result.skipped) == (1, 0, 1)
        assert workflow.bids.bids[bid.id].status == BidStatus.REJECTED
        assert "bid.expired" not in workflow.outbox.names()

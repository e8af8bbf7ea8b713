"""Bid ledger use cases: bidding, counter-offers, acceptance and expiry."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from jobflow.application.interfaces.repositories import (
    BidRepositoryInterface,
    JobRepositoryInterface,
)
from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.use_cases.assignment import (
    assigned_event,
    claim_job,
    ensure_assignable,
    reject_open_bids,
)
from jobflow.application.use_cases.common import (
    ensure_job_owner,
    ensure_role,
    load_bid,
    load_job,
)
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.domain.entities.bid import Bid
from jobflow.domain.entities.job import Job
from jobflow.domain.events.bid_events import BidCountered, BidExpired, BidPlaced
from jobflow.domain.exceptions.validation_error import InvalidAmountError
from jobflow.domain.exceptions.workflow_error import (
    ConcurrentModificationError,
    DuplicateBidError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    RoundLimitError,
)
from jobflow.domain.state_machine import ensure_operation_allowed
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from jobflow.infrastructure.monitoring.metrics import (
    record_assignment,
    record_bid,
    record_bid_expired,
)

logger = get_logger(__name__)


def _positive_price(field_name: str, value: Decimal) -> Decimal:
    value = Decimal(str(value)) if not isinstance(value, Decimal) else value
    if value <= 0:
        raise InvalidAmountError(field_name, value)
    return value


class _BidUseCase:
    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        bid_repo: BidRepositoryInterface,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.bid_repo = bid_repo
        self.outbox = outbox
        self.transaction_service = transaction_service


class PlaceBidUseCase(_BidUseCase):
    """Technician offers a price for a job."""

    async def execute(
        self,
        job_id: UUID,
        actor: Actor,
        offered_price: Decimal,
        message: Optional[str] = None,
    ) -> Bid:
        ensure_role(actor, Role.TECHNICIAN)
        offered_price = _positive_price("offered_price", offered_price)
        technician_id = actor.user_id

        async def operation() -> Bid:
            job = await load_job(self.job_repo, job_id)
            ensure_operation_allowed(job.status, "bid")

            existing = await self.bid_repo.list_for_technician(job.id, technician_id)
            if any(bid.is_active for bid in existing):
                raise DuplicateBidError(job.id, technician_id)

            # Serialises bids with assignment on the job version
            try:
                job = await self.job_repo.update(job)
            except ConcurrentModificationError:
                raise InvalidStateError(
                    "Job changed while the bid was being placed; reload and retry",
                    current_status=job.status.value,
                )

            bid = await self.bid_repo.create(
                Bid(
                    job_id=job.id,
                    technician_id=technician_id,
                    offered_price=offered_price,
                    message=message,
                )
            )
            await self.outbox.record(
                BidPlaced(
                    bid_id=bid.id,
                    job_id=job.id,
                    technician_id=technician_id,
                    offered_price=bid.offered_price,
                    placed_at=bid.created_at,
                )
            )
            return bid

        bid = await self.transaction_service.execute_in_transaction(operation)
        record_bid("bid")

        logger.info(
            "Bid placed",
            bid_id=str(bid.id),
            job_id=str(job_id),
            technician_id=str(technician_id),
            offered_price=str(bid.offered_price),
        )
        return bid


class CounterOfferUseCase(_BidUseCase):
    """Dealer answers a technician's bid with a different price."""

    def __init__(self, *args, max_rounds: int = settings.MAX_NEGOTIATION_ROUNDS, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_rounds = max_rounds

    async def execute(self, bid_id: UUID, actor: Actor, new_price: Decimal) -> Bid:
        ensure_role(actor, Role.DEALER)
        new_price = _positive_price("new_price", new_price)

        async def operation() -> Bid:
            bid = await load_bid(self.bid_repo, bid_id)
            job = await load_job(self.job_repo, bid.job_id)
            ensure_job_owner(actor, job)
            ensure_operation_allowed(job.status, "counter_offer")

            chain = await self.bid_repo.list_for_technician(job.id, bid.technician_id)
            latest_round = max(
                [b.round_number for b in chain if b.is_active] + [bid.round_number]
            )
            if latest_round + 1 > self.max_rounds:
                raise RoundLimitError(self.max_rounds)
            if bid.is_counter_offer:
                raise InvalidStateError(
                    "Counter-offers are answered by the technician",
                    current_status=bid.status.value,
                )

            counter = bid.counter(new_price, max_rounds=self.max_rounds)
            await self.bid_repo.update(bid, expected_status=BidStatus.PENDING)
            counter = await self.bid_repo.create(counter)

            job.record_negotiation_round(counter.round_number)
            await self.job_repo.update(job)

            await self.outbox.record(
                BidCountered(
                    bid_id=bid.id,
                    counter_offer_id=counter.id,
                    job_id=job.id,
                    technician_id=counter.technician_id,
                    offered_price=counter.offered_price,
                    round_number=counter.round_number,
                    countered_at=counter.created_at,
                )
            )
            return counter

        counter = await self.transaction_service.execute_in_transaction(operation)
        record_bid("counter_offer")

        logger.info(
            "Counter-offer sent",
            bid_id=str(bid_id),
            counter_offer_id=str(counter.id),
            round_number=counter.round_number,
            offered_price=str(counter.offered_price),
        )
        return counter


async def _load_counter_offer(
    bid_repo: BidRepositoryInterface, counter_offer_id: UUID, actor: Actor
) -> Bid:
    counter = await bid_repo.get_by_id(counter_offer_id)
    if not counter or not counter.is_counter_offer:
        raise NotFoundError("Counter-offer", counter_offer_id)
    if not actor.owns(counter.technician_id):
        raise ForbiddenError("Counter-offer is addressed to another technician")
    if counter.status != BidStatus.PENDING:
        raise InvalidStateError(
            f"Counter-offer is already {counter.status.value}",
            current_status=counter.status.value,
        )
    return counter


class AcceptCounterOfferUseCase(_BidUseCase):
    """Technician agrees to the dealer's counter price and wins the job."""

    async def execute(self, counter_offer_id: UUID, actor: Actor) -> Job:
        ensure_role(actor, Role.TECHNICIAN)

        async def operation() -> Job:
            counter = await _load_counter_offer(self.bid_repo, counter_offer_id, actor)
            original = await load_bid(self.bid_repo, counter.previous_bid_id)
            job = await load_job(self.job_repo, counter.job_id)
            ensure_assignable(job, counter.technician_id, "accept_bid")

            job.assign_negotiated(
                counter.technician_id, counter.offered_price, counter.round_number
            )
            job = await claim_job(self.job_repo, job, "counter_offer")

            counter.accept()
            await self.bid_repo.update(counter, expected_status=BidStatus.PENDING)
            original_status = original.status
            original.accept()
            await self.bid_repo.update(original, expected_status=original_status)

            rejected = await reject_open_bids(
                self.bid_repo, job.id, keep={counter.id, original.id}
            )
            await self.outbox.record(assigned_event(job, bid_id=counter.id))

            logger.info(
                "Counter-offer accepted",
                job_id=str(job.id),
                counter_offer_id=str(counter.id),
                technician_id=str(counter.technician_id),
                final_price=str(job.final_price),
                rejected_bids=rejected,
            )
            return job

        job = await self.transaction_service.execute_in_transaction(operation)
        record_assignment("counter_offer")
        return job


class RejectCounterOfferUseCase(_BidUseCase):
    """Technician declines the counter price, ending their negotiation."""

    async def execute(self, counter_offer_id: UUID, actor: Actor) -> Bid:
        ensure_role(actor, Role.TECHNICIAN)

        async def operation() -> Bid:
            counter = await _load_counter_offer(self.bid_repo, counter_offer_id, actor)
            counter.reject()
            counter = await self.bid_repo.update(counter, expected_status=BidStatus.PENDING)

            original = await self.bid_repo.get_by_id(counter.previous_bid_id)
            if original and original.is_active:
                original_status = original.status
                original.reject()
                await self.bid_repo.update(original, expected_status=original_status)
            return counter

        counter = await self.transaction_service.execute_in_transaction(operation)
        logger.info(
            "Counter-offer rejected",
            counter_offer_id=str(counter.id),
            job_id=str(counter.job_id),
            technician_id=str(counter.technician_id),
        )
        return counter


async def _load_open_technician_bid(
    bid_repo: BidRepositoryInterface, bid_id: UUID
) -> Bid:
    bid = await load_bid(bid_repo, bid_id)
    if bid.is_counter_offer:
        raise InvalidStateError(
            "Counter-offers are answered by the technician",
            current_status=bid.status.value,
        )
    if bid.status != BidStatus.PENDING:
        raise InvalidStateError(
            f"Bid is already {bid.status.value}", current_status=bid.status.value
        )
    return bid


class AcceptBidUseCase(_BidUseCase):
    """Dealer accepts a technician's bid as offered."""

    async def execute(self, bid_id: UUID, actor: Actor) -> Job:
        ensure_role(actor, Role.DEALER)

        async def operation() -> Job:
            bid = await _load_open_technician_bid(self.bid_repo, bid_id)
            job = await load_job(self.job_repo, bid.job_id)
            ensure_job_owner(actor, job)
            ensure_assignable(job, bid.technician_id, "accept_bid")

            job.assign_negotiated(bid.technician_id, bid.offered_price, bid.round_number)
            job = await claim_job(self.job_repo, job, "bid")

            bid.accept()
            await self.bid_repo.update(bid, expected_status=BidStatus.PENDING)
            rejected = await reject_open_bids(self.bid_repo, job.id, keep={bid.id})
            await self.outbox.record(assigned_event(job, bid_id=bid.id))

            logger.info(
                "Bid accepted",
                job_id=str(job.id),
                bid_id=str(bid.id),
                technician_id=str(bid.technician_id),
                final_price=str(job.final_price),
                rejected_bids=rejected,
            )
            return job

        job = await self.transaction_service.execute_in_transaction(operation)
        record_assignment("bid")
        return job


class RejectBidUseCase(_BidUseCase):
    """Dealer turns a bid down."""

    async def execute(self, bid_id: UUID, actor: Actor) -> Bid:
        ensure_role(actor, Role.DEALER)

        async def operation() -> Bid:
            bid = await _load_open_technician_bid(self.bid_repo, bid_id)
            job = await load_job(self.job_repo, bid.job_id)
            ensure_job_owner(actor, job)

            bid.reject()
            return await self.bid_repo.update(bid, expected_status=BidStatus.PENDING)

        bid = await self.transaction_service.execute_in_transaction(operation)
        logger.info("Bid rejected", bid_id=str(bid.id), job_id=str(bid.job_id))
        return bid


@dataclass
class BidExpirySweepResult:
    """Result of a bid expiry sweep."""

    total_processed: int = 0
    expired: int = 0
    skipped: int = 0


class ExpireStaleBidsUseCase:
    """Closes bids and counter-offers left unanswered past the response window.

    An expired counter-offer takes the bid it answered with it, so the
    technician may bid on the job again. The job itself stays open.
    """

    def __init__(
        self,
        bid_repo: BidRepositoryInterface,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
        expiry_hours: int = settings.BID_EXPIRY_HOURS,
    ):
        self.bid_repo = bid_repo
        self.outbox = outbox
        self.transaction_service = transaction_service
        self.expiry_window = timedelta(hours=expiry_hours)

    async def execute(
        self, now: Optional[datetime] = None, limit: int = 100
    ) -> BidExpirySweepResult:
        now = now or datetime.now(timezone.utc)
        stale = await self.bid_repo.find_expired_pending(now - self.expiry_window, limit=limit)

        result = BidExpirySweepResult(total_processed=len(stale))
        for candidate in stale:
            try:
                expired = await self.transaction_service.execute_in_transaction(
                    lambda bid_id=candidate.id: self._expire(bid_id, now)
                )
            except ConcurrentModificationError:
                # Answered while we were expiring it
                expired = False

            if expired:
                result.expired += 1
                record_bid_expired("counter_offer" if candidate.is_counter_offer else "bid")
            else:
                result.skipped += 1

        logger.info(
            "Bid expiry sweep finished",
            total_processed=result.total_processed,
            expired=result.expired,
            skipped=result.skipped,
        )
        return result

    async def _expire(self, bid_id: UUID, now: datetime) -> bool:
        bid = await self.bid_repo.get_by_id(bid_id)
        if bid is None or bid.status != BidStatus.PENDING:
            return False

        bid.expire(now)
        await self.bid_repo.update(bid, expected_status=BidStatus.PENDING)

        if bid.is_counter_offer:
            original = await self.bid_repo.get_by_id(bid.previous_bid_id)
            if original and original.is_active:
                original_status = original.status
                original.expire(now)
                await self.bid_repo.update(original, expected_status=original_status)

        await self.outbox.record(
            BidExpired(
                bid_id=bid.id,
                job_id=bid.job_id,
                technician_id=bid.technician_id,
                is_counter_offer=bid.is_counter_offer,
                expired_at=now,
            )
        )
        logger.info(
            "Bid expired",
            bid_id=str(bid.id),
            job_id=str(bid.job_id),
            technician_id=str(bid.technician_id),
            is_counter_offer=bid.is_counter_offer,
        )
        return True

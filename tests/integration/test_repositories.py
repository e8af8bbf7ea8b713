"""
Integration tests for the SQLAlchemy repositories, the transactional outbox
and the periodic sweeps against an in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from jobflow.application.services.transactional_outbox import (
    OutboxEventStatus,
    OutboxEventType,
    TransactionalOutbox,
)
from jobflow.application.use_cases import (
    AcceptJobDirectUseCase,
    ApproveCompletionUseCase,
    HandlePaymentCapturedUseCase,
    OnJobCompletedUseCase,
    PlaceBidUseCase,
    PostJobUseCase,
    StartJobUseCase,
    SubmitCompletionUseCase,
)
from jobflow.background.tasks.sweeps import (
    cleanup_outbox_events,
    expire_stale_bids,
    expire_unpaid_assignments,
    release_due_warranty_holds,
)
from jobflow.domain.entities.payment_release import PaymentRelease
from jobflow.domain.entities.warranty_hold import WarrantyHold
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.warranty_hold_status import (
    PaymentReleaseKind,
    WarrantyHoldStatus,
)
from jobflow.infrastructure.database.repositories import (
    BidRepository,
    JobRepository,
    PaymentRepository,
    TransactionService,
)

pytestmark = pytest.mark.integration


async def _post(session, dealer, request):
    use_case = PostJobUseCase(
        JobRepository(session), TransactionalOutbox(session), TransactionService(session)
    )
    return await use_case.execute(dealer, request)


async def _accept(session, job_id, technician):
    use_case = AcceptJobDirectUseCase(
        JobRepository(session),
        BidRepository(session),
        TransactionalOutbox(session),
        TransactionService(session),
    )
    return await use_case.execute(job_id, technician, terms_accepted=True)


async def _complete(session, job_id, dealer, technician):
    jobs = JobRepository(session)
    tx = TransactionService(session)
    await HandlePaymentCapturedUseCase(jobs, tx).execute(job_id, "pay_sqlite_1")
    await StartJobUseCase(jobs, tx).execute(job_id, technician)
    await SubmitCompletionUseCase(jobs, tx).execute(job_id, technician)
    on_completed = OnJobCompletedUseCase(jobs, PaymentRepository(session), tx)
    approve = ApproveCompletionUseCase(jobs, tx, on_completed, TransactionalOutbox(session))
    return await approve.execute(job_id, dealer)


class TestJobRepository:
    """Test cases for JobRepository."""

    @pytest.mark.asyncio
    async def test_round_trip(self, db_session, dealer, make_job_request):
        job = await _post(db_session, dealer, make_job_request(amount=Decimal("1500.50")))

        stored = await JobRepository(db_session).get_by_id(job.id)

        assert stored.job_number == job.job_number
        assert stored.status == JobStatus.PENDING
        assert stored.amount == Decimal("1500.50")
        assert stored.location.address == "12 100 Feet Road"
        assert stored.customer.name == "Priya Nair"
        assert stored.created_at.tzinfo is not None
        assert stored.version == job.version

    @pytest.mark.asyncio
    async def test_stale_update_refused(self, db_session, dealer, make_job_request):
        repo = JobRepository(db_session)
        job = await _post(db_session, dealer, make_job_request())
        first = await repo.get_by_id(job.id)
        second = await repo.get_by_id(job.id)

        first.title = "AC not cooling at all"
        await repo.update(first)

        second.title = "Someone else's edit"
        with pytest.raises(ConcurrentModificationError):
            await repo.update(second)

        stored = await repo.get_by_id(job.id)
        assert stored.title == "AC not cooling at all"
        assert stored.version == second.version + 1

    @pytest.mark.asyncio
    async def test_find_payment_overdue(
        self, db_session, dealer, technician, make_job_request
    ):
        job = await _post(db_session, dealer, make_job_request(amount=Decimal("800")))
        accepted = await _accept(db_session, job.id, technician)
        repo = JobRepository(db_session)

        assert await repo.find_payment_overdue(accepted.payment_due_at - timedelta(minutes=1)) == []
        overdue = await repo.find_payment_overdue(accepted.payment_due_at)
        assert [j.id for j in overdue] == [job.id]


class TestPaymentRepository:
    """Test cases for PaymentRepository."""

    def _hold(self, job_id, starts_at, days=7):
        return WarrantyHold(
            job_id=job_id,
            technician_id=uuid4(),
            amount=Decimal("200"),
            warranty_days=days,
            starts_at=starts_at,
        )

    async def _job_id(self, session, dealer, make_job_request):
        job = await _post(session, dealer, make_job_request())
        return job.id

    @pytest.mark.asyncio
    async def test_second_payout_rejected(self, db_session, dealer, make_job_request):
        job_id = await self._job_id(db_session, dealer, make_job_request)
        repo = PaymentRepository(db_session)
        now = datetime.now(timezone.utc)

        await repo.create_release(
            PaymentRelease(
                job_id=job_id,
                technician_id=uuid4(),
                kind=PaymentReleaseKind.WARRANTY_HOLD,
                amount=Decimal("200"),
                released_at=now,
            )
        )
        with pytest.raises(IntegrityError):
            await repo.create_release(
                PaymentRelease(
                    job_id=job_id,
                    technician_id=uuid4(),
                    kind=PaymentReleaseKind.WARRANTY_HOLD,
                    amount=Decimal("200"),
                    released_at=now,
                )
            )

    @pytest.mark.asyncio
    async def test_find_due_holds(self, db_session, dealer, make_job_request):
        repo = PaymentRepository(db_session)
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)

        due = await repo.create_hold(
            self._hold(await self._job_id(db_session, dealer, make_job_request), start, 7)
        )
        frozen = await repo.create_hold(
            self._hold(await self._job_id(db_session, dealer, make_job_request), start, 3)
        )
        await repo.create_hold(
            self._hold(await self._job_id(db_session, dealer, make_job_request), start, 30)
        )

        frozen.freeze(start + timedelta(days=1))
        await repo.update_hold(frozen, expected_status=WarrantyHoldStatus.LOCKED)

        found = await repo.find_due_holds(start + timedelta(days=8))

        assert {hold.id for hold in found} == {due.id, frozen.id}
        by_id = {hold.id: hold for hold in found}
        assert by_id[frozen.id].status == WarrantyHoldStatus.FROZEN

    @pytest.mark.asyncio
    async def test_update_hold_checks_status(self, db_session, dealer, make_job_request):
        repo = PaymentRepository(db_session)
        hold = await repo.create_hold(
            self._hold(
                await self._job_id(db_session, dealer, make_job_request),
                datetime.now(timezone.utc),
            )
        )

        with pytest.raises(ConcurrentModificationError):
            await repo.update_hold(hold, expected_status=WarrantyHoldStatus.FROZEN)


class TestTransactionalOutbox:
    """Test cases for TransactionalOutbox against the outbox table."""

    @pytest.mark.asyncio
    async def test_event_lifecycle(self, db_session):
        outbox = TransactionalOutbox(db_session)
        event = await outbox.create_event(
            OutboxEventType.JOB_POSTED, "job-1", {"job_number": "JOB-1"}
        )
        await db_session.commit()

        pending = await outbox.get_pending_events()
        assert [e.id for e in pending] == [event.id]
        assert pending[0].event_data == {"job_number": "JOB-1"}
        assert pending[0].status == OutboxEventStatus.PENDING

        assert await outbox.mark_event_processing(event.id) is True
        assert await outbox.mark_event_processing(event.id) is False
        assert await outbox.get_pending_events() == []

        await outbox.mark_event_completed(event.id)
        assert await outbox.cleanup_completed_events(days_old=-1) == 1

    @pytest.mark.asyncio
    async def test_failed_event_parked_after_retries(self, db_session):
        outbox = TransactionalOutbox(db_session)
        event = await outbox.create_event(
            OutboxEventType.JOB_ASSIGNED, "job-2", {}, max_retries=2
        )
        await db_session.commit()

        assert await outbox.mark_event_failed(event, "timeout") is True
        [retried] = await outbox.get_pending_events()
        assert retried.retry_count == 1
        assert retried.error_message == "timeout"

        assert await outbox.mark_event_failed(retried, "timeout again") is False
        assert await outbox.get_pending_events() == []

    @pytest.mark.asyncio
    async def test_released_event_is_pending_again(self, db_session):
        outbox = TransactionalOutbox(db_session)
        event = await outbox.create_event(OutboxEventType.BID_PLACED, "job-3", {})
        await db_session.commit()
        await outbox.mark_event_processing(event.id)

        await outbox.release_event(event.id)

        [pending] = await outbox.get_pending_events()
        assert pending.retry_count == 0

    @pytest.mark.asyncio
    async def test_filter_by_type(self, db_session):
        outbox = TransactionalOutbox(db_session)
        await outbox.create_event(OutboxEventType.BID_PLACED, "job-4", {})
        assigned = await outbox.create_event(OutboxEventType.JOB_ASSIGNED, "job-4", {})
        await db_session.commit()

        events = await outbox.get_pending_events(event_type=OutboxEventType.JOB_ASSIGNED)

        assert [e.id for e in events] == [assigned.id]


class TestPeriodicSweeps:
    """The Celery sweep bodies run against the database directly."""

    @pytest.mark.asyncio
    async def test_release_sweep(
        self, db_session, session_factory, dealer, technician, make_job_request
    ):
        job = await _post(db_session, dealer, make_job_request(amount=Decimal("10000")))
        await _accept(db_session, job.id, technician)
        result = await _complete(db_session, job.id, dealer, technician)
        due = result.job.completed_at + timedelta(days=30)

        early = await release_due_warranty_holds(session_factory, now=due - timedelta(hours=1))
        assert early["total_processed"] == 0

        report = await release_due_warranty_holds(session_factory, now=due)
        assert report == {
            "status": "success",
            "total_processed": 1,
            "outcomes": {"RELEASED": 1},
            "errors": 0,
        }

        async with session_factory() as session:
            payments = PaymentRepository(session)
            hold = await payments.get_hold_by_job(job.id)
            immediate = await payments.get_release(job.id, PaymentReleaseKind.IMMEDIATE)
            held = await payments.get_release(job.id, PaymentReleaseKind.WARRANTY_HOLD)
            pending = await TransactionalOutbox(session).get_pending_events()

        assert hold.status == WarrantyHoldStatus.RELEASED
        assert immediate.amount == Decimal("8000")
        assert held.amount == Decimal("2000")
        assert [e.event_type for e in pending] == [
            OutboxEventType.JOB_POSTED,
            OutboxEventType.JOB_ASSIGNED,
            OutboxEventType.JOB_COMPLETED,
            OutboxEventType.WARRANTY_RELEASED,
        ]

    @pytest.mark.asyncio
    async def test_expiry_sweep(
        self, db_session, session_factory, dealer, technician, make_job_request
    ):
        job = await _post(db_session, dealer, make_job_request(amount=Decimal("800")))
        accepted = await _accept(db_session, job.id, technician)

        report = await expire_unpaid_assignments(
            session_factory, now=accepted.payment_due_at + timedelta(minutes=1)
        )

        assert report["reopened"] == 1
        async with session_factory() as session:
            reopened = await JobRepository(session).get_by_id(job.id)
        assert reopened.status == JobStatus.PENDING
        assert reopened.assigned_technician_id is None

    @pytest.mark.asyncio
    async def test_bid_expiry_sweep(
        self, db_session, session_factory, dealer, technician, make_job_request
    ):
        job = await _post(db_session, dealer, make_job_request())
        place_bid = PlaceBidUseCase(
            JobRepository(db_session),
            BidRepository(db_session),
            TransactionalOutbox(db_session),
            TransactionService(db_session),
        )
        bid = await place_bid.execute(job.id, technician, Decimal("9500"))

        early = await expire_stale_bids(session_factory, now=bid.created_at + timedelta(hours=1))
        assert early["total_processed"] == 0

        report = await expire_stale_bids(
            session_factory, now=bid.created_at + timedelta(hours=25)
        )
        assert report == {"status": "success", "total_processed": 1, "expired": 1, "skipped": 0}

        async with session_factory() as session:
            stored = await BidRepository(session).get_by_id(bid.id)
            job_after = await JobRepository(session).get_by_id(job.id)
        assert stored.status == BidStatus.EXPIRED
        assert job_after.status == JobStatus.PENDING

    @pytest.mark.asyncio
    async def test_cleanup_sweep(self, db_session, session_factory):
        outbox = TransactionalOutbox(db_session)
        event = await outbox.create_event(OutboxEventType.JOB_POSTED, "job-5", {})
        await db_session.commit()
        await outbox.mark_event_completed(event.id)

        report = await cleanup_outbox_events(session_factory, days_old=-1)

        assert report == {"status": "success", "deleted": 1}

"""
Pytest configuration and fixtures.
"""

import asyncio
import copy
import os
from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENABLE_BACKGROUND_WORKERS", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from jobflow.application.interfaces.repositories import (
    BidRepositoryInterface,
    DealerProfileRepositoryInterface,
    DisputeRepositoryInterface,
    JobRepositoryInterface,
    PaymentRepositoryInterface,
    TechnicianRepositoryInterface,
)
from jobflow.application.services.visibility_gate import VisibilityGate
from jobflow.application.use_cases import (
    AcceptBidUseCase,
    AcceptCounterOfferUseCase,
    AcceptJobDirectUseCase,
    ApproveCompletionUseCase,
    CancelJobUseCase,
    CounterOfferUseCase,
    CreatePaymentIntentUseCase,
    ExpireStaleBidsUseCase,
    ExpireUnpaidAssignmentsUseCase,
    GetJobBidsUseCase,
    GetJobForTechnicianUseCase,
    GetPaymentSplitUseCase,
    HandlePaymentCapturedUseCase,
    ListOpenJobsUseCase,
    ManualReleaseWarrantyHoldUseCase,
    OnJobCompletedUseCase,
    OpenDisputeUseCase,
    PlaceBidUseCase,
    PostJobUseCase,
    RejectBidUseCase,
    RejectCompletionUseCase,
    RejectCounterOfferUseCase,
    ReleaseDueWarrantyHoldsUseCase,
    ReleaseWarrantyHoldUseCase,
    ResolveDisputeUseCase,
    StartJobUseCase,
    SubmitCompletionUseCase,
)
from jobflow.application.use_cases.post_job import PostJobRequest
from jobflow.domain.entities.bid import Bid
from jobflow.domain.entities.dealer_profile import DealerProfile
from jobflow.domain.entities.dispute import Dispute
from jobflow.domain.entities.job import Job
from jobflow.domain.entities.payment_release import PaymentRelease
from jobflow.domain.entities.payment_split import PaymentSplit
from jobflow.domain.entities.technician import Technician
from jobflow.domain.entities.warranty_hold import WarrantyHold
from jobflow.domain.exceptions.workflow_error import ConcurrentModificationError
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.domain.value_objects.customer_contact import CustomerContact
from jobflow.domain.value_objects.dispute_status import DisputeStatus
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.location import JobLocation
from jobflow.domain.value_objects.warranty_hold_status import (
    PaymentReleaseKind,
    WarrantyHoldStatus,
)
from jobflow.infrastructure.database.models import Base
from jobflow.infrastructure.payments.mock import MockPaymentGateway

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# In-memory repositories. Reads hand out copies and yield to the event loop
# so concurrent use cases interleave the way they would against a database.


class FakeJobRepository(JobRepositoryInterface):
    def __init__(self):
        self.jobs: Dict[UUID, Job] = {}

    async def get_by_id(self, job_id: UUID) -> Optional[Job]:
        snapshot = copy.deepcopy(self.jobs.get(job_id))
        await asyncio.sleep(0)
        return snapshot

    async def create(self, job: Job) -> Job:
        self.jobs[job.id] = copy.deepcopy(job)
        return job

    async def update(self, job: Job) -> Job:
        stored = self.jobs.get(job.id)
        if stored is None or stored.version != job.version:
            raise ConcurrentModificationError("Job", job.id)
        job.version += 1
        self.jobs[job.id] = copy.deepcopy(job)
        return job

    async def find_by_status(self, status: JobStatus, limit: int = 100) -> List[Job]:
        jobs = [job for job in self.jobs.values() if job.status == status]
        return [copy.deepcopy(job) for job in jobs[:limit]]

    async def find_payment_overdue(self, now: datetime, limit: int = 100) -> List[Job]:
        jobs = [job for job in self.jobs.values() if job.is_payment_overdue(now)]
        return [copy.deepcopy(job) for job in jobs[:limit]]


class FakeBidRepository(BidRepositoryInterface):
    def __init__(self):
        self.bids: Dict[UUID, Bid] = {}

    async def get_by_id(self, bid_id: UUID) -> Optional[Bid]:
        snapshot = copy.deepcopy(self.bids.get(bid_id))
        await asyncio.sleep(0)
        return snapshot

    async def create(self, bid: Bid) -> Bid:
        self.bids[bid.id] = copy.deepcopy(bid)
        return bid

    async def update(self, bid: Bid, expected_status: BidStatus) -> Bid:
        stored = self.bids.get(bid.id)
        if stored is None or stored.status != expected_status:
            raise ConcurrentModificationError("Bid", bid.id)
        self.bids[bid.id] = copy.deepcopy(bid)
        return bid

    async def list_by_job(self, job_id: UUID) -> List[Bid]:
        return [copy.deepcopy(b) for b in self.bids.values() if b.job_id == job_id]

    async def list_active_by_job(self, job_id: UUID) -> List[Bid]:
        return [b for b in await self.list_by_job(job_id) if b.is_active]

    async def list_for_technician(self, job_id: UUID, technician_id: UUID) -> List[Bid]:
        return [b for b in await self.list_by_job(job_id) if b.technician_id == technician_id]

    async def find_expired_pending(self, cutoff: datetime, limit: int = 100) -> List[Bid]:
        bids = sorted(
            (
                b
                for b in self.bids.values()
                if b.status == BidStatus.PENDING and b.created_at <= cutoff
            ),
            key=lambda b: b.created_at,
        )
        return [copy.deepcopy(b) for b in bids[:limit]]


class FakePaymentRepository(PaymentRepositoryInterface):
    def __init__(self):
        self.splits: Dict[UUID, PaymentSplit] = {}
        self.holds: Dict[UUID, WarrantyHold] = {}
        self.releases: Dict[Tuple[UUID, PaymentReleaseKind], PaymentRelease] = {}

    async def get_split_by_job(self, job_id: UUID) -> Optional[PaymentSplit]:
        return copy.deepcopy(self.splits.get(job_id))

    async def create_split(self, split: PaymentSplit) -> PaymentSplit:
        if split.job_id in self.splits:
            raise ConcurrentModificationError("PaymentSplit", split.id)
        self.splits[split.job_id] = copy.deepcopy(split)
        return split

    async def update_split(self, split: PaymentSplit) -> PaymentSplit:
        self.splits[split.job_id] = copy.deepcopy(split)
        return split

    async def get_hold_by_job(self, job_id: UUID) -> Optional[WarrantyHold]:
        snapshot = copy.deepcopy(self.holds.get(job_id))
        await asyncio.sleep(0)
        return snapshot

    async def create_hold(self, hold: WarrantyHold) -> WarrantyHold:
        self.holds[hold.job_id] = copy.deepcopy(hold)
        return hold

    async def update_hold(
        self, hold: WarrantyHold, expected_status: WarrantyHoldStatus
    ) -> WarrantyHold:
        stored = self.holds.get(hold.job_id)
        if stored is None or stored.status != expected_status:
            raise ConcurrentModificationError("WarrantyHold", hold.id)
        self.holds[hold.job_id] = copy.deepcopy(hold)
        return hold

    async def find_due_holds(self, now: datetime, limit: int = 100) -> List[WarrantyHold]:
        due = [
            hold
            for hold in self.holds.values()
            if hold.status in (WarrantyHoldStatus.LOCKED, WarrantyHoldStatus.FROZEN)
            and hold.effective_release_at <= now
        ]
        return [copy.deepcopy(hold) for hold in due[:limit]]

    async def get_release(
        self, job_id: UUID, kind: PaymentReleaseKind
    ) -> Optional[PaymentRelease]:
        return copy.deepcopy(self.releases.get((job_id, kind)))

    async def create_release(self, release: PaymentRelease) -> PaymentRelease:
        key = (release.job_id, release.kind)
        if key in self.releases:
            raise ConcurrentModificationError("PaymentRelease", release.id)
        self.releases[key] = copy.deepcopy(release)
        return release


class FakeDisputeRepository(DisputeRepositoryInterface):
    def __init__(self):
        self.disputes: Dict[UUID, Dispute] = {}

    async def get_by_id(self, dispute_id: UUID) -> Optional[Dispute]:
        return copy.deepcopy(self.disputes.get(dispute_id))

    async def get_open_for_job(self, job_id: UUID) -> Optional[Dispute]:
        for dispute in self.disputes.values():
            if dispute.job_id == job_id and dispute.status == DisputeStatus.OPEN:
                return copy.deepcopy(dispute)
        return None

    async def create(self, dispute: Dispute) -> Dispute:
        self.disputes[dispute.id] = copy.deepcopy(dispute)
        return dispute

    async def update(self, dispute: Dispute) -> Dispute:
        stored = self.disputes.get(dispute.id)
        if stored is None or stored.status != DisputeStatus.OPEN:
            raise ConcurrentModificationError("Dispute", dispute.id)
        self.disputes[dispute.id] = copy.deepcopy(dispute)
        return dispute


class FakeDealerProfileRepository(DealerProfileRepositoryInterface):
    def __init__(self):
        self.profiles: Dict[UUID, DealerProfile] = {}

    async def get_by_user_id(self, user_id: UUID) -> Optional[DealerProfile]:
        return self.profiles.get(user_id)

    async def create(self, profile: DealerProfile) -> DealerProfile:
        self.profiles[profile.user_id] = profile
        return profile


class FakeTechnicianRepository(TechnicianRepositoryInterface):
    def __init__(self):
        self.technicians: Dict[UUID, Technician] = {}

    async def get_by_id(self, technician_id: UUID) -> Optional[Technician]:
        return self.technicians.get(technician_id)

    async def get_many(self, technician_ids: List[UUID]) -> List[Technician]:
        return [self.technicians[i] for i in technician_ids if i in self.technicians]

    async def create(self, technician: Technician) -> Technician:
        self.technicians[technician.id] = technician
        return technician


class FakeTransactionService:
    """Runs operations directly and counts commits and rollbacks."""

    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def execute_in_transaction(self, operation):
        try:
            result = await operation()
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1
        return result


class FakeOutbox:
    def __init__(self):
        self.events = []

    async def record(self, event):
        self.events.append(event)
        return event

    def names(self) -> List[str]:
        return [event.event_name for event in self.events]


class Workflow:
    """Every workflow use case wired to the same in-memory stores."""

    def __init__(self, max_rounds: int = 2, immediate_percent: int = 80):
        self.jobs = FakeJobRepository()
        self.bids = FakeBidRepository()
        self.payments = FakePaymentRepository()
        self.disputes = FakeDisputeRepository()
        self.dealers = FakeDealerProfileRepository()
        self.technicians = FakeTechnicianRepository()
        self.outbox = FakeOutbox()
        self.tx = FakeTransactionService()
        self.gateway = MockPaymentGateway()
        self.gate = VisibilityGate()

        bidding = (self.jobs, self.bids, self.outbox, self.tx)
        self.post_job = PostJobUseCase(self.jobs, self.outbox, self.tx)
        self.accept_direct = AcceptJobDirectUseCase(self.jobs, self.bids, self.outbox, self.tx)
        self.place_bid = PlaceBidUseCase(*bidding)
        self.counter_offer = CounterOfferUseCase(*bidding, max_rounds=max_rounds)
        self.accept_counter = AcceptCounterOfferUseCase(*bidding)
        self.reject_counter = RejectCounterOfferUseCase(*bidding)
        self.accept_bid = AcceptBidUseCase(*bidding)
        self.reject_bid = RejectBidUseCase(*bidding)
        self.expire_bids = ExpireStaleBidsUseCase(self.bids, self.outbox, self.tx, expiry_hours=24)
        self.start = StartJobUseCase(self.jobs, self.tx)
        self.submit_completion = SubmitCompletionUseCase(self.jobs, self.tx)
        self.reject_completion = RejectCompletionUseCase(self.jobs, self.tx)
        self.on_job_completed = OnJobCompletedUseCase(
            self.jobs, self.payments, self.tx, immediate_percent=immediate_percent
        )
        self.approve = ApproveCompletionUseCase(
            self.jobs, self.tx, self.on_job_completed, self.outbox
        )
        self.cancel = CancelJobUseCase(self.jobs, self.bids, self.tx)
        self.expire = ExpireUnpaidAssignmentsUseCase(self.jobs, self.tx)
        self.payment_intent = CreatePaymentIntentUseCase(self.jobs, self.gateway, self.tx)
        self.payment_captured = HandlePaymentCapturedUseCase(self.jobs, self.tx)
        self.payment_split = GetPaymentSplitUseCase(
            self.jobs, self.payments, immediate_percent=immediate_percent
        )
        self.release = ReleaseWarrantyHoldUseCase(
            self.jobs, self.payments, self.disputes, self.outbox, self.tx
        )
        self.release_due = ReleaseDueWarrantyHoldsUseCase(self.payments, self.release)
        self.manual_release = ManualReleaseWarrantyHoldUseCase(self.release)
        self.open_dispute = OpenDisputeUseCase(self.jobs, self.payments, self.disputes, self.tx)
        self.resolve_dispute = ResolveDisputeUseCase(
            self.jobs, self.payments, self.disputes, self.tx
        )
        self.job_detail = GetJobForTechnicianUseCase(self.jobs, self.bids, self.dealers, self.gate)
        self.open_jobs = ListOpenJobsUseCase(self.jobs, self.job_detail)
        self.job_bids = GetJobBidsUseCase(self.jobs, self.bids, self.technicians, self.gate)

    async def stored_job(self, job_id: UUID) -> Job:
        return await self.jobs.get_by_id(job_id)

    async def posted(self, dealer: Actor, **overrides) -> Job:
        return await self.post_job.execute(dealer, make_post_request(**overrides))

    async def paid_and_assigned(
        self, dealer: Actor, technician: Actor, amount: str = "10000", **overrides
    ) -> Job:
        job = await self.posted(dealer, amount=Decimal(amount), **overrides)
        await self.accept_direct.execute(job.id, technician, terms_accepted=True)
        return await self.payment_captured.execute(job.id, f"pay_{job.id.hex[:12]}")

    async def completed(
        self, dealer: Actor, technician: Actor, amount: str = "10000", **overrides
    ) -> Job:
        job = await self.paid_and_assigned(dealer, technician, amount, **overrides)
        await self.start.execute(job.id, technician)
        await self.submit_completion.execute(job.id, technician)
        result = await self.approve.execute(job.id, dealer)
        return result.job


def make_location(**overrides) -> JobLocation:
    values = dict(
        city="Bengaluru",
        state="Karnataka",
        place_name="Indiranagar",
        latitude=12.97,
        longitude=77.64,
        address="12 100 Feet Road",
        pincode="560038",
    )
    values.update(overrides)
    return JobLocation(**values)


def make_post_request(**overrides) -> PostJobRequest:
    values = dict(
        title="AC not cooling",
        description="Split AC blows warm air",
        location=make_location(),
        customer=CustomerContact(name="Priya Nair", phone="+919811111111", email="priya@example.com"),
        work_details="Check refrigerant, clean coils",
        amount=None,
        warranty_days=30,
    )
    values.update(overrides)
    return PostJobRequest(**values)


@pytest.fixture
def workflow() -> Workflow:
    return Workflow()


@pytest.fixture
def dealer() -> Actor:
    return Actor(user_id=uuid4(), role=Role.DEALER)


@pytest.fixture
def other_dealer() -> Actor:
    return Actor(user_id=uuid4(), role=Role.DEALER)


@pytest.fixture
def technician() -> Actor:
    return Actor(user_id=uuid4(), role=Role.TECHNICIAN)


@pytest.fixture
def other_technician() -> Actor:
    return Actor(user_id=uuid4(), role=Role.TECHNICIAN)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=uuid4(), role=Role.ADMIN)


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_job_request():
    """Factory for post-job requests with sensible defaults."""
    return make_post_request


@pytest.fixture
def make_workflow():
    """Factory for harnesses with non-default negotiation or split settings."""
    return Workflow

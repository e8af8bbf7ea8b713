"""
Repository interfaces for dependency inversion.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from jobflow.domain.entities.bid import Bid
from jobflow.domain.entities.dealer_profile import DealerProfile
from jobflow.domain.entities.dispute import Dispute
from jobflow.domain.entities.job import Job
from jobflow.domain.entities.payment_release import PaymentRelease
from jobflow.domain.entities.payment_split import PaymentSplit
from jobflow.domain.entities.technician import Technician
from jobflow.domain.entities.warranty_hold import WarrantyHold
from jobflow.domain.value_objects.bid_status import BidStatus
from jobflow.domain.value_objects.job_status import JobStatus
from jobflow.domain.value_objects.warranty_hold_status import (
    PaymentReleaseKind,
    WarrantyHoldStatus,
)


class JobRepositoryInterface(ABC):
    """Job repository interface."""

    @abstractmethod
    async def get_by_id(self, job_id: UUID) -> Optional[Job]:
        """Get job by ID."""
        pass

    @abstractmethod
    async def create(self, job: Job) -> Job:
        """Create a new job."""
        pass

    @abstractmethod
    async def update(self, job: Job) -> Job:
        """
        Update an existing job if nobody else changed it first.

        The write only applies when the stored version still equals
        ``job.version``; the returned job carries the bumped version.

        Raises:
            ConcurrentModificationError: If the stored version moved on.
        """
        pass

    @abstractmethod
    async def find_by_status(self, status: JobStatus, limit: int = 100) -> List[Job]:
        """Find jobs in a given status, oldest first."""
        pass

    @abstractmethod
    async def find_payment_overdue(self, now: datetime, limit: int = 100) -> List[Job]:
        """Find jobs waiting for payment whose deadline has passed."""
        pass


class BidRepositoryInterface(ABC):
    """Bid repository interface."""

    @abstractmethod
    async def get_by_id(self, bid_id: UUID) -> Optional[Bid]:
        """Get bid by ID."""
        pass

    @abstractmethod
    async def create(self, bid: Bid) -> Bid:
        """Create a new bid or counter-offer."""
        pass

    @abstractmethod
    async def update(self, bid: Bid, expected_status: BidStatus) -> Bid:
        """
        Update a bid if its stored status is still ``expected_status``.

        Raises:
            ConcurrentModificationError: If the bid was answered concurrently.
        """
        pass

    @abstractmethod
    async def list_by_job(self, job_id: UUID) -> List[Bid]:
        """Get all bids and counter-offers for a job, oldest first."""
        pass

    @abstractmethod
    async def list_active_by_job(self, job_id: UUID) -> List[Bid]:
        """Get PENDING and COUNTERED bids for a job."""
        pass

    @abstractmethod
    async def list_for_technician(self, job_id: UUID, technician_id: UUID) -> List[Bid]:
        """Get a technician's bids and counter-offers on a job, oldest first."""
        pass

    @abstractmethod
    async def find_expired_pending(self, cutoff: datetime, limit: int = 100) -> List[Bid]:
        """Find PENDING bids and counter-offers created at or before ``cutoff``."""
        pass


class PaymentRepositoryInterface(ABC):
    """Payment split, warranty hold and release ledger repository interface."""

    @abstractmethod
    async def get_split_by_job(self, job_id: UUID) -> Optional[PaymentSplit]:
        """Get the persisted split for a job."""
        pass

    @abstractmethod
    async def create_split(self, split: PaymentSplit) -> PaymentSplit:
        """Persist a payment split."""
        pass

    @abstractmethod
    async def update_split(self, split: PaymentSplit) -> PaymentSplit:
        """Update a payment split."""
        pass

    @abstractmethod
    async def get_hold_by_job(self, job_id: UUID) -> Optional[WarrantyHold]:
        """Get the warranty hold for a job."""
        pass

    @abstractmethod
    async def create_hold(self, hold: WarrantyHold) -> WarrantyHold:
        """Persist a warranty hold."""
        pass

    @abstractmethod
    async def update_hold(
        self, hold: WarrantyHold, expected_status: WarrantyHoldStatus
    ) -> WarrantyHold:
        """
        Update a warranty hold if its stored status is still ``expected_status``.

        Raises:
            ConcurrentModificationError: If the hold changed concurrently.
        """
        pass

    @abstractmethod
    async def find_due_holds(self, now: datetime, limit: int = 100) -> List[WarrantyHold]:
        """Find unreleased holds whose release date has passed."""
        pass

    @abstractmethod
    async def get_release(
        self, job_id: UUID, kind: PaymentReleaseKind
    ) -> Optional[PaymentRelease]:
        """Get the recorded payout of a kind for a job."""
        pass

    @abstractmethod
    async def create_release(self, release: PaymentRelease) -> PaymentRelease:
        """Record a payout. A job holds at most one release per kind."""
        pass


class DisputeRepositoryInterface(ABC):
    """Dispute repository interface."""

    @abstractmethod
    async def get_by_id(self, dispute_id: UUID) -> Optional[Dispute]:
        """Get dispute by ID."""
        pass

    @abstractmethod
    async def get_open_for_job(self, job_id: UUID) -> Optional[Dispute]:
        """Get the open dispute for a job, if any."""
        pass

    @abstractmethod
    async def create(self, dispute: Dispute) -> Dispute:
        """Create a new dispute."""
        pass

    @abstractmethod
    async def update(self, dispute: Dispute) -> Dispute:
        """Update a dispute."""
        pass


class DealerProfileRepositoryInterface(ABC):
    """Dealer profile repository interface."""

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> Optional[DealerProfile]:
        """Get dealer profile by user ID."""
        pass

    @abstractmethod
    async def create(self, profile: DealerProfile) -> DealerProfile:
        """Create a dealer profile."""
        pass


class TechnicianRepositoryInterface(ABC):
    """Technician repository interface."""

    @abstractmethod
    async def get_by_id(self, technician_id: UUID) -> Optional[Technician]:
        """Get technician by ID."""
        pass

    @abstractmethod
    async def get_many(self, technician_ids: List[UUID]) -> List[Technician]:
        """Get several technicians at once."""
        pass

    @abstractmethod
    async def create(self, technician: Technician) -> Technician:
        """Create a new technician."""
        pass

"""Read-only job queries projected through the visibility gate."""

from typing import List
from uuid import UUID

from jobflow.application.interfaces.repositories import (
    BidRepositoryInterface,
    DealerProfileRepositoryInterface,
    JobRepositoryInterface,
    TechnicianRepositoryInterface,
)
from jobflow.application.services.visibility_gate import BidView, JobView, VisibilityGate
from jobflow.application.use_cases.common import ensure_job_owner, ensure_role, load_job
from jobflow.config.logging import get_logger
from jobflow.domain.entities.job import Job
from jobflow.domain.exceptions.workflow_error import NotFoundError
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.domain.value_objects.job_status import JobStatus

logger = get_logger(__name__)


class GetJobForTechnicianUseCase:
    """Job detail as a technician is allowed to see it."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        bid_repo: BidRepositoryInterface,
        dealer_repo: DealerProfileRepositoryInterface,
        gate: VisibilityGate,
    ):
        self.job_repo = job_repo
        self.bid_repo = bid_repo
        self.dealer_repo = dealer_repo
        self.gate = gate

    async def execute(self, job_id: UUID, viewer_technician_id: UUID) -> JobView:
        job = await self.job_repo.get_by_id(job_id)
        if not job or job.status == JobStatus.CANCELLED:
            raise NotFoundError("Job", job_id)

        return await self.project(job, viewer_technician_id)

    async def project(self, job: Job, viewer_technician_id: UUID) -> JobView:
        dealer = await self.dealer_repo.get_by_user_id(job.dealer_id)
        viewer_bids = await self.bid_repo.list_for_technician(job.id, viewer_technician_id)
        return self.gate.job_for_technician(job, viewer_technician_id, dealer, viewer_bids)


class ListOpenJobsUseCase:
    """Jobs technicians can still bid on or accept."""

    def __init__(self, job_repo: JobRepositoryInterface, detail: GetJobForTechnicianUseCase):
        self.job_repo = job_repo
        self.detail = detail

    async def execute(self, actor: Actor, limit: int = 50) -> List[JobView]:
        ensure_role(actor, Role.TECHNICIAN)

        jobs = await self.job_repo.find_by_status(JobStatus.PENDING, limit=limit)
        views = [await self.detail.project(job, actor.user_id) for job in jobs]

        logger.debug("Listed open jobs", technician_id=str(actor.user_id), count=len(views))
        return views


class GetJobBidsUseCase:
    """Bids on a job as its dealer is allowed to see them."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        bid_repo: BidRepositoryInterface,
        technician_repo: TechnicianRepositoryInterface,
        gate: VisibilityGate,
    ):
        self.job_repo = job_repo
        self.bid_repo = bid_repo
        self.technician_repo = technician_repo
        self.gate = gate

    async def execute(self, job_id: UUID, actor: Actor) -> List[BidView]:
        job = await load_job(self.job_repo, job_id)
        ensure_job_owner(actor, job)

        bids = await self.bid_repo.list_by_job(job.id)
        technicians = await self.technician_repo.get_many(
            list({bid.technician_id for bid in bids})
        )
        by_id = {technician.id: technician for technician in technicians}

        return [self.gate.bid_for_dealer(bid, job, by_id.get(bid.technician_id)) for bid in bids]

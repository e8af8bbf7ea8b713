"""Lookups and permission checks shared by the workflow use cases."""

from uuid import UUID

from jobflow.application.interfaces.repositories import (
    BidRepositoryInterface,
    JobRepositoryInterface,
)
from jobflow.domain.entities.bid import Bid
from jobflow.domain.entities.job import Job
from jobflow.domain.exceptions.workflow_error import ForbiddenError, NotFoundError
from jobflow.domain.value_objects.actor import Actor, Role


async def load_job(job_repo: JobRepositoryInterface, job_id: UUID) -> Job:
    job = await job_repo.get_by_id(job_id)
    if not job:
        raise NotFoundError("Job", job_id)
    return job


async def load_bid(bid_repo: BidRepositoryInterface, bid_id: UUID) -> Bid:
    bid = await bid_repo.get_by_id(bid_id)
    if not bid:
        raise NotFoundError("Bid", bid_id)
    return bid


def ensure_role(actor: Actor, *roles: Role) -> None:
    """Admins pass every role check."""
    if actor.is_admin or actor.role in roles:
        return
    allowed = ", ".join(role.value for role in roles)
    raise ForbiddenError(f"Role {actor.role.value} cannot perform this action ({allowed} only)")


def ensure_job_owner(actor: Actor, job: Job) -> None:
    """Only the dealer who posted the job (or an admin) may manage it."""
    ensure_role(actor, Role.DEALER)
    if not actor.owns(job.dealer_id):
        raise ForbiddenError(f"Job {job.job_number} belongs to another dealer")

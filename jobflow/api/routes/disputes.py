"""Warranty release and dispute endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from jobflow.api.dependencies import (
    ActorDep,
    ManualReleaseDep,
    OpenDisputeDep,
    ResolveDisputeDep,
)
from jobflow.api.schemas.payment import (
    DisputeCreateRequest,
    DisputeResolveRequest,
    DisputeResponse,
    ReleaseResponse,
)

router = APIRouter(tags=["warranty"])


@router.post("/jobs/{job_id}/warranty/release", response_model=ReleaseResponse)
async def release_warranty_hold(job_id: UUID, actor: ActorDep, use_case: ManualReleaseDep):
    """Admin-triggered release; same rules as the periodic sweep."""
    outcome = await use_case.execute(job_id, actor)
    return ReleaseResponse(job_id=job_id, outcome=outcome)


@router.post(
    "/jobs/{job_id}/disputes",
    response_model=DisputeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def open_dispute(
    job_id: UUID, body: DisputeCreateRequest, actor: ActorDep, use_case: OpenDisputeDep
):
    """Dealer disputes completed work, freezing the warranty hold."""
    dispute = await use_case.execute(job_id, actor, body.reason)
    return DisputeResponse.model_validate(dispute)


@router.post("/disputes/{dispute_id}/resolve", response_model=DisputeResponse)
async def resolve_dispute(
    dispute_id: UUID, body: DisputeResolveRequest, actor: ActorDep, use_case: ResolveDisputeDep
):
    dispute = await use_case.execute(dispute_id, actor, body.outcome, note=body.note)
    return DisputeResponse.model_validate(dispute)

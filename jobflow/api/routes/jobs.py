"""Job endpoints: posting, viewing, direct acceptance and job progress."""

from typing import List, Union
from uuid import UUID

from fastapi import APIRouter, Query, status

from jobflow.api.dependencies import (
    AcceptJobDirectDep,
    ActorDep,
    ApproveCompletionDep,
    CancelJobDep,
    CreatePaymentIntentDep,
    JobBidsDep,
    JobForTechnicianDep,
    JobRepositoryDep,
    ListOpenJobsDep,
    PaymentSplitDep,
    PlaceBidDep,
    PostJobDep,
    RejectCompletionDep,
    StartJobDep,
    SubmitCompletionDep,
)
from jobflow.api.routes.responses import job_response, preview_response, split_response
from jobflow.api.schemas.bid import BidCreateRequest, BidResponse, DealerBidResponse
from jobflow.api.schemas.job import (
    AcceptJobRequest,
    JobCreateRequest,
    JobResponse,
    ReasonRequest,
    TechnicianJobResponse,
)
from jobflow.api.schemas.payment import (
    CompletionResponse,
    PaymentIntentResponse,
    PaymentSplitResponse,
)
from jobflow.application.use_cases.common import ensure_job_owner, load_job
from jobflow.application.use_cases.post_job import PostJobRequest
from jobflow.config.logging import get_logger
from jobflow.domain.exceptions.validation_error import ValidationError
from jobflow.domain.value_objects.customer_contact import CustomerContact
from jobflow.domain.value_objects.location import JobLocation

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def post_job(job_data: JobCreateRequest, actor: ActorDep, use_case: PostJobDep):
    """Dealer posts a new job."""
    try:
        location = JobLocation(**job_data.location.model_dump())
        customer = CustomerContact(**job_data.customer.model_dump()) if job_data.customer else None
    except ValueError as e:
        raise ValidationError(str(e))

    job = await use_case.execute(
        actor,
        PostJobRequest(
            title=job_data.title,
            description=job_data.description,
            location=location,
            customer=customer,
            work_details=job_data.work_details,
            amount=job_data.amount,
            warranty_days=job_data.warranty_days,
        ),
    )
    return job_response(job)


@router.get("/open", response_model=List[TechnicianJobResponse])
async def list_open_jobs(
    actor: ActorDep,
    use_case: ListOpenJobsDep,
    limit: int = Query(50, ge=1, le=200),
):
    """Jobs the calling technician can bid on or accept."""
    views = await use_case.execute(actor, limit=limit)
    return [TechnicianJobResponse.model_validate(view) for view in views]


@router.get("/{job_id}", response_model=Union[TechnicianJobResponse, JobResponse])
async def get_job(
    job_id: UUID,
    actor: ActorDep,
    job_repo: JobRepositoryDep,
    detail: JobForTechnicianDep,
):
    """Technicians get the gated view; the owning dealer gets the full job."""
    if actor.is_technician:
        view = await detail.execute(job_id, actor.user_id)
        return TechnicianJobResponse.model_validate(view)

    job = await load_job(job_repo, job_id)
    ensure_job_owner(actor, job)
    return job_response(job)


@router.get("/{job_id}/bids", response_model=List[DealerBidResponse])
async def get_job_bids(job_id: UUID, actor: ActorDep, use_case: JobBidsDep):
    """Bids on the job, as its dealer may see them."""
    views = await use_case.execute(job_id, actor)
    return [DealerBidResponse.model_validate(view) for view in views]


@router.post(
    "/{job_id}/bids", response_model=BidResponse, status_code=status.HTTP_201_CREATED
)
async def place_bid(
    job_id: UUID, bid_data: BidCreateRequest, actor: ActorDep, use_case: PlaceBidDep
):
    """Technician offers a price for the job."""
    bid = await use_case.execute(job_id, actor, bid_data.offered_price, bid_data.message)
    return BidResponse.model_validate(bid)


@router.post("/{job_id}/accept", response_model=TechnicianJobResponse)
async def accept_job(
    job_id: UUID,
    body: AcceptJobRequest,
    actor: ActorDep,
    use_case: AcceptJobDirectDep,
    detail: JobForTechnicianDep,
):
    """Technician takes the job at the posted amount."""
    job = await use_case.execute(job_id, actor, terms_accepted=body.terms_accepted)
    return TechnicianJobResponse.model_validate(await detail.project(job, actor.user_id))


@router.post("/{job_id}/start", response_model=TechnicianJobResponse)
async def start_job(
    job_id: UUID, actor: ActorDep, use_case: StartJobDep, detail: JobForTechnicianDep
):
    job = await use_case.execute(job_id, actor)
    return TechnicianJobResponse.model_validate(await detail.project(job, actor.user_id))


@router.post("/{job_id}/complete", response_model=TechnicianJobResponse)
async def submit_completion(
    job_id: UUID,
    actor: ActorDep,
    use_case: SubmitCompletionDep,
    detail: JobForTechnicianDep,
):
    job = await use_case.execute(job_id, actor)
    return TechnicianJobResponse.model_validate(await detail.project(job, actor.user_id))


@router.post("/{job_id}/approve", response_model=CompletionResponse)
async def approve_completion(job_id: UUID, actor: ActorDep, use_case: ApproveCompletionDep):
    """Dealer approves the work; the payout split is recorded."""
    result = await use_case.execute(job_id, actor)
    return CompletionResponse(job=job_response(result.job), split=split_response(result.split))


@router.post("/{job_id}/reject-completion", response_model=JobResponse)
async def reject_completion(
    job_id: UUID, body: ReasonRequest, actor: ActorDep, use_case: RejectCompletionDep
):
    job = await use_case.execute(job_id, actor, reason=body.reason)
    return job_response(job)


@router.post("/{job_id}/cancel", response_model=JobResponse)
async def cancel_job(
    job_id: UUID, body: ReasonRequest, actor: ActorDep, use_case: CancelJobDep
):
    job = await use_case.execute(job_id, actor, reason=body.reason)
    return job_response(job)


@router.post("/{job_id}/payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    job_id: UUID, actor: ActorDep, use_case: CreatePaymentIntentDep
):
    """Dealer gets a gateway order to pay the agreed price."""
    intent = await use_case.execute(job_id, actor)
    return PaymentIntentResponse.model_validate(intent)


@router.get("/{job_id}/payment-split", response_model=PaymentSplitResponse)
async def get_payment_split(job_id: UUID, actor: ActorDep, use_case: PaymentSplitDep):
    """Recorded split, or a preview before completion."""
    preview = await use_case.execute(job_id, actor)
    return preview_response(preview)

"""Bid negotiation endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from jobflow.api.dependencies import (
    AcceptBidDep,
    AcceptCounterOfferDep,
    ActorDep,
    CounterOfferDep,
    JobForTechnicianDep,
    RejectBidDep,
    RejectCounterOfferDep,
)
from jobflow.api.routes.responses import job_response
from jobflow.api.schemas.bid import BidResponse, CounterOfferRequest
from jobflow.api.schemas.job import JobResponse, TechnicianJobResponse

router = APIRouter(tags=["bids"])


@router.post(
    "/bids/{bid_id}/counter",
    response_model=BidResponse,
    status_code=status.HTTP_201_CREATED,
)
async def counter_offer(
    bid_id: UUID, body: CounterOfferRequest, actor: ActorDep, use_case: CounterOfferDep
):
    """Dealer answers a bid with a different price."""
    counter = await use_case.execute(bid_id, actor, body.new_price)
    return BidResponse.model_validate(counter)


@router.post("/bids/{bid_id}/accept", response_model=JobResponse)
async def accept_bid(bid_id: UUID, actor: ActorDep, use_case: AcceptBidDep):
    """Dealer accepts a technician's bid and assigns the job."""
    job = await use_case.execute(bid_id, actor)
    return job_response(job)


@router.post("/bids/{bid_id}/reject", response_model=BidResponse)
async def reject_bid(bid_id: UUID, actor: ActorDep, use_case: RejectBidDep):
    bid = await use_case.execute(bid_id, actor)
    return BidResponse.model_validate(bid)


@router.post("/counter-offers/{counter_offer_id}/accept", response_model=TechnicianJobResponse)
async def accept_counter_offer(
    counter_offer_id: UUID,
    actor: ActorDep,
    use_case: AcceptCounterOfferDep,
    detail: JobForTechnicianDep,
):
    """Technician agrees to the dealer's price and gets the job."""
    job = await use_case.execute(counter_offer_id, actor)
    return TechnicianJobResponse.model_validate(await detail.project(job, actor.user_id))


@router.post("/counter-offers/{counter_offer_id}/reject", response_model=BidResponse)
async def reject_counter_offer(
    counter_offer_id: UUID, actor: ActorDep, use_case: RejectCounterOfferDep
):
    counter = await use_case.execute(counter_offer_id, actor)
    return BidResponse.model_validate(counter)

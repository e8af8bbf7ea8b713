"""
FastAPI dependency injection container.
"""

from functools import lru_cache
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.application.interfaces.gateways import PaymentGatewayInterface
from jobflow.application.services.transactional_outbox import TransactionalOutbox
from jobflow.application.services.visibility_gate import VisibilityGate
from jobflow.application.use_cases import (
    AcceptBidUseCase,
    AcceptCounterOfferUseCase,
    AcceptJobDirectUseCase,
    ApproveCompletionUseCase,
    CancelJobUseCase,
    CounterOfferUseCase,
    CreatePaymentIntentUseCase,
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
    ReleaseWarrantyHoldUseCase,
    ResolveDisputeUseCase,
    StartJobUseCase,
    SubmitCompletionUseCase,
)
from jobflow.config.database import get_db_session
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.domain.value_objects.actor import Actor, Role
from jobflow.infrastructure.database.repositories import (
    BidRepository,
    DealerProfileRepository,
    DisputeRepository,
    JobRepository,
    PaymentRepository,
    TechnicianRepository,
    TransactionService,
)
from jobflow.infrastructure.payments import get_payment_gateway

logger = get_logger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


# Caller identity
async def get_actor(
    x_user_id: Annotated[Optional[str], Header(alias="X-User-Id")] = None,
    x_user_role: Annotated[Optional[str], Header(alias="X-User-Role")] = None,
) -> Actor:
    """Build the caller from the session provider's identity headers."""
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity headers",
        )
    try:
        return Actor(user_id=UUID(x_user_id), role=Role(x_user_role.upper()))
    except ValueError:
        logger.warning("Invalid caller identity", user_id=x_user_id, role=x_user_role)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller identity headers",
        )


ActorDep = Annotated[Actor, Depends(get_actor)]


# Database Dependencies
async def get_job_repository(db: SessionDep) -> JobRepository:
    return JobRepository(db)


async def get_bid_repository(db: SessionDep) -> BidRepository:
    return BidRepository(db)


async def get_payment_repository(db: SessionDep) -> PaymentRepository:
    return PaymentRepository(db)


async def get_dispute_repository(db: SessionDep) -> DisputeRepository:
    return DisputeRepository(db)


async def get_dealer_profile_repository(db: SessionDep) -> DealerProfileRepository:
    return DealerProfileRepository(db)


async def get_technician_repository(db: SessionDep) -> TechnicianRepository:
    return TechnicianRepository(db)


async def get_transaction_service(db: SessionDep) -> TransactionService:
    return TransactionService(db)


async def get_transactional_outbox(db: SessionDep) -> TransactionalOutbox:
    return TransactionalOutbox(db, max_retries=settings.OUTBOX_MAX_RETRIES)


JobRepositoryDep = Annotated[JobRepository, Depends(get_job_repository)]
BidRepositoryDep = Annotated[BidRepository, Depends(get_bid_repository)]
PaymentRepositoryDep = Annotated[PaymentRepository, Depends(get_payment_repository)]
DisputeRepositoryDep = Annotated[DisputeRepository, Depends(get_dispute_repository)]
DealerProfileRepositoryDep = Annotated[
    DealerProfileRepository, Depends(get_dealer_profile_repository)
]
TechnicianRepositoryDep = Annotated[TechnicianRepository, Depends(get_technician_repository)]
TransactionServiceDep = Annotated[TransactionService, Depends(get_transaction_service)]
TransactionalOutboxDep = Annotated[TransactionalOutbox, Depends(get_transactional_outbox)]


# Service Dependencies
@lru_cache
def get_cached_payment_gateway() -> PaymentGatewayInterface:
    """Payment gateway shared across requests."""
    return get_payment_gateway(settings)


def get_payment_gateway_dep() -> PaymentGatewayInterface:
    return get_cached_payment_gateway()


def get_visibility_gate() -> VisibilityGate:
    return VisibilityGate()


PaymentGatewayDep = Annotated[PaymentGatewayInterface, Depends(get_payment_gateway_dep)]
VisibilityGateDep = Annotated[VisibilityGate, Depends(get_visibility_gate)]


# Use case Dependencies
def get_post_job_use_case(
    job_repo: JobRepositoryDep,
    outbox: TransactionalOutboxDep,
    transaction_service: TransactionServiceDep,
) -> PostJobUseCase:
    return PostJobUseCase(job_repo, outbox, transaction_service)


def get_job_for_technician_use_case(
    job_repo: JobRepositoryDep,
    bid_repo: BidRepositoryDep,
    dealer_repo: DealerProfileRepositoryDep,
    gate: VisibilityGateDep,
) -> GetJobForTechnicianUseCase:
    return GetJobForTechnicianUseCase(job_repo, bid_repo, dealer_repo, gate)


JobForTechnicianDep = Annotated[
    GetJobForTechnicianUseCase, Depends(get_job_for_technician_use_case)
]


def get_list_open_jobs_use_case(
    job_repo: JobRepositoryDep, detail: JobForTechnicianDep
) -> ListOpenJobsUseCase:
    return ListOpenJobsUseCase(job_repo, detail)


def get_job_bids_use_case(
    job_repo: JobRepositoryDep,
    bid_repo: BidRepositoryDep,
    technician_repo: TechnicianRepositoryDep,
    gate: VisibilityGateDep,
) -> GetJobBidsUseCase:
    return GetJobBidsUseCase(job_repo, bid_repo, technician_repo, gate)


def get_accept_job_direct_use_case(
    job_repo: JobRepositoryDep,
    bid_repo: BidRepositoryDep,
    outbox: TransactionalOutboxDep,
    transaction_service: TransactionServiceDep,
) -> AcceptJobDirectUseCase:
    return AcceptJobDirectUseCase(
        job_repo,
        bid_repo,
        outbox,
        transaction_service,
        payment_due_minutes=settings.PAYMENT_DUE_MINUTES,
    )


def _bidding_args(
    job_repo: JobRepositoryDep,
    bid_repo: BidRepositoryDep,
    outbox: TransactionalOutboxDep,
    transaction_service: TransactionServiceDep,
) -> tuple:
    return job_repo, bid_repo, outbox, transaction_service


BiddingArgsDep = Annotated[tuple, Depends(_bidding_args)]


def get_place_bid_use_case(args: BiddingArgsDep) -> PlaceBidUseCase:
    return PlaceBidUseCase(*args)


def get_counter_offer_use_case(args: BiddingArgsDep) -> CounterOfferUseCase:
    return CounterOfferUseCase(*args, max_rounds=settings.MAX_NEGOTIATION_ROUNDS)


def get_accept_counter_offer_use_case(args: BiddingArgsDep) -> AcceptCounterOfferUseCase:
    return AcceptCounterOfferUseCase(*args)


def get_reject_counter_offer_use_case(args: BiddingArgsDep) -> RejectCounterOfferUseCase:
    return RejectCounterOfferUseCase(*args)


def get_accept_bid_use_case(args: BiddingArgsDep) -> AcceptBidUseCase:
    return AcceptBidUseCase(*args)


def get_reject_bid_use_case(args: BiddingArgsDep) -> RejectBidUseCase:
    return RejectBidUseCase(*args)


def get_start_job_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> StartJobUseCase:
    return StartJobUseCase(job_repo, transaction_service)


def get_submit_completion_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> SubmitCompletionUseCase:
    return SubmitCompletionUseCase(job_repo, transaction_service)


def get_reject_completion_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> RejectCompletionUseCase:
    return RejectCompletionUseCase(job_repo, transaction_service)


def get_on_job_completed_use_case(
    job_repo: JobRepositoryDep,
    payment_repo: PaymentRepositoryDep,
    transaction_service: TransactionServiceDep,
) -> OnJobCompletedUseCase:
    return OnJobCompletedUseCase(
        job_repo,
        payment_repo,
        transaction_service,
        immediate_percent=settings.IMMEDIATE_RELEASE_PERCENT,
    )


def get_approve_completion_use_case(
    job_repo: JobRepositoryDep,
    transaction_service: TransactionServiceDep,
    on_job_completed: Annotated[OnJobCompletedUseCase, Depends(get_on_job_completed_use_case)],
    outbox: TransactionalOutboxDep,
) -> ApproveCompletionUseCase:
    return ApproveCompletionUseCase(job_repo, transaction_service, on_job_completed, outbox)


def get_cancel_job_use_case(
    job_repo: JobRepositoryDep,
    bid_repo: BidRepositoryDep,
    transaction_service: TransactionServiceDep,
) -> CancelJobUseCase:
    return CancelJobUseCase(job_repo, bid_repo, transaction_service)


def get_create_payment_intent_use_case(
    job_repo: JobRepositoryDep,
    gateway: PaymentGatewayDep,
    transaction_service: TransactionServiceDep,
) -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(
        job_repo, gateway, transaction_service, currency=settings.PAYMENT_CURRENCY
    )


def get_handle_payment_captured_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> HandlePaymentCapturedUseCase:
    return HandlePaymentCapturedUseCase(job_repo, transaction_service)


def get_payment_split_use_case(
    job_repo: JobRepositoryDep, payment_repo: PaymentRepositoryDep
) -> GetPaymentSplitUseCase:
    return GetPaymentSplitUseCase(
        job_repo, payment_repo, immediate_percent=settings.IMMEDIATE_RELEASE_PERCENT
    )


def get_release_warranty_hold_use_case(
    job_repo: JobRepositoryDep,
    payment_repo: PaymentRepositoryDep,
    dispute_repo: DisputeRepositoryDep,
    outbox: TransactionalOutboxDep,
    transaction_service: TransactionServiceDep,
) -> ReleaseWarrantyHoldUseCase:
    return ReleaseWarrantyHoldUseCase(
        job_repo, payment_repo, dispute_repo, outbox, transaction_service
    )


def get_manual_release_use_case(
    release_use_case: Annotated[
        ReleaseWarrantyHoldUseCase, Depends(get_release_warranty_hold_use_case)
    ],
) -> ManualReleaseWarrantyHoldUseCase:
    return ManualReleaseWarrantyHoldUseCase(release_use_case)


def get_open_dispute_use_case(
    job_repo: JobRepositoryDep,
    payment_repo: PaymentRepositoryDep,
    dispute_repo: DisputeRepositoryDep,
    transaction_service: TransactionServiceDep,
) -> OpenDisputeUseCase:
    return OpenDisputeUseCase(job_repo, payment_repo, dispute_repo, transaction_service)


def get_resolve_dispute_use_case(
    job_repo: JobRepositoryDep,
    payment_repo: PaymentRepositoryDep,
    dispute_repo: DisputeRepositoryDep,
    transaction_service: TransactionServiceDep,
) -> ResolveDisputeUseCase:
    return ResolveDisputeUseCase(job_repo, payment_repo, dispute_repo, transaction_service)


# Type aliases for cleaner dependency injection
PostJobDep = Annotated[PostJobUseCase, Depends(get_post_job_use_case)]
ListOpenJobsDep = Annotated[ListOpenJobsUseCase, Depends(get_list_open_jobs_use_case)]
JobBidsDep = Annotated[GetJobBidsUseCase, Depends(get_job_bids_use_case)]
AcceptJobDirectDep = Annotated[AcceptJobDirectUseCase, Depends(get_accept_job_direct_use_case)]
PlaceBidDep = Annotated[PlaceBidUseCase, Depends(get_place_bid_use_case)]
CounterOfferDep = Annotated[CounterOfferUseCase, Depends(get_counter_offer_use_case)]
AcceptCounterOfferDep = Annotated[
    AcceptCounterOfferUseCase, Depends(get_accept_counter_offer_use_case)
]
RejectCounterOfferDep = Annotated[
    RejectCounterOfferUseCase, Depends(get_reject_counter_offer_use_case)
]
AcceptBidDep = Annotated[AcceptBidUseCase, Depends(get_accept_bid_use_case)]
RejectBidDep = Annotated[RejectBidUseCase, Depends(get_reject_bid_use_case)]
StartJobDep = Annotated[StartJobUseCase, Depends(get_start_job_use_case)]
SubmitCompletionDep = Annotated[SubmitCompletionUseCase, Depends(get_submit_completion_use_case)]
RejectCompletionDep = Annotated[RejectCompletionUseCase, Depends(get_reject_completion_use_case)]
ApproveCompletionDep = Annotated[
    ApproveCompletionUseCase, Depends(get_approve_completion_use_case)
]
CancelJobDep = Annotated[CancelJobUseCase, Depends(get_cancel_job_use_case)]
CreatePaymentIntentDep = Annotated[
    CreatePaymentIntentUseCase, Depends(get_create_payment_intent_use_case)
]
HandlePaymentCapturedDep = Annotated[
    HandlePaymentCapturedUseCase, Depends(get_handle_payment_captured_use_case)
]
PaymentSplitDep = Annotated[GetPaymentSplitUseCase, Depends(get_payment_split_use_case)]
ManualReleaseDep = Annotated[
    ManualReleaseWarrantyHoldUseCase, Depends(get_manual_release_use_case)
]
OpenDisputeDep = Annotated[OpenDisputeUseCase, Depends(get_open_dispute_use_case)]
ResolveDisputeDep = Annotated[ResolveDisputeUseCase, Depends(get_resolve_dispute_use_case)]

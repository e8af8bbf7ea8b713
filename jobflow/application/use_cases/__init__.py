"""
Use cases package.

This package contains the workflow use cases that orchestrate the domain
entities, repositories and gateways. Each mutating use case runs as a single
database transaction.
"""

from .assignment import AcceptJobDirectUseCase
from .bidding import (
    AcceptBidUseCase,
    AcceptCounterOfferUseCase,
    CounterOfferUseCase,
    ExpireStaleBidsUseCase,
    PlaceBidUseCase,
    RejectBidUseCase,
    RejectCounterOfferUseCase,
)
from .cancel_job import CancelJobUseCase, ExpireUnpaidAssignmentsUseCase
from .disputes import OpenDisputeUseCase, ResolveDisputeUseCase
from .job_progress import (
    ApproveCompletionUseCase,
    RejectCompletionUseCase,
    StartJobUseCase,
    SubmitCompletionUseCase,
)
from .job_queries import GetJobBidsUseCase, GetJobForTechnicianUseCase, ListOpenJobsUseCase
from .payments import CreatePaymentIntentUseCase, HandlePaymentCapturedUseCase
from .post_job import PostJobUseCase
from .warranty_release import (
    GetPaymentSplitUseCase,
    ManualReleaseWarrantyHoldUseCase,
    OnJobCompletedUseCase,
    ReleaseDueWarrantyHoldsUseCase,
    ReleaseWarrantyHoldUseCase,
)

__all__ = [
    "AcceptBidUseCase",
    "AcceptCounterOfferUseCase",
    "AcceptJobDirectUseCase",
    "ApproveCompletionUseCase",
    "CancelJobUseCase",
    "CounterOfferUseCase",
    "CreatePaymentIntentUseCase",
    "ExpireStaleBidsUseCase",
    "ExpireUnpaidAssignmentsUseCase",
    "GetJobBidsUseCase",
    "GetJobForTechnicianUseCase",
    "GetPaymentSplitUseCase",
    "HandlePaymentCapturedUseCase",
    "ListOpenJobsUseCase",
    "ManualReleaseWarrantyHoldUseCase",
    "OnJobCompletedUseCase",
    "OpenDisputeUseCase",
    "PlaceBidUseCase",
    "RejectBidUseCase",
    "RejectCompletionUseCase",
    "RejectCounterOfferUseCase",
    "ReleaseDueWarrantyHoldsUseCase",
    "ReleaseWarrantyHoldUseCase",
    "ResolveDisputeUseCase",
    "StartJobUseCase",
    "SubmitCompletionUseCase",
]

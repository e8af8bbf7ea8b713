"""
Builders turning use case results into response schemas.
"""

from jobflow.api.schemas.job import JobResponse
from jobflow.api.schemas.payment import PaymentSplitResponse, WarrantyHoldResponse
from jobflow.application.use_cases.warranty_release import SplitPreview
from jobflow.domain.entities.job import Job
from jobflow.domain.entities.payment_split import PaymentSplit
from jobflow.domain.entities.warranty_hold import WarrantyHold


def job_response(job: Job) -> JobResponse:
    return JobResponse.model_validate(job)


def split_response(
    split: PaymentSplit, persisted: bool = True, hold: WarrantyHold = None
) -> PaymentSplitResponse:
    return PaymentSplitResponse(
        job_id=split.job_id,
        total_amount=split.total_amount,
        immediate_release=split.immediate_release,
        warranty_hold=split.warranty_hold,
        persisted=persisted,
        immediate_released_at=split.immediate_released_at,
        hold=WarrantyHoldResponse.model_validate(hold) if hold else None,
    )


def preview_response(preview: SplitPreview) -> PaymentSplitResponse:
    return split_response(preview.split, persisted=preview.persisted, hold=preview.hold)

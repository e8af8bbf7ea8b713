"""
Webhook endpoints for payment gateway callbacks.
"""

import json

from fastapi import APIRouter, HTTPException, Request, status

from jobflow.api.dependencies import HandlePaymentCapturedDep, PaymentGatewayDep
from jobflow.api.schemas.payment import WebhookAck
from jobflow.config.logging import get_logger
from jobflow.domain.exceptions.validation_error import ValidationError

router = APIRouter(tags=["webhooks"])
logger = get_logger(__name__)

SIGNATURE_HEADERS = ("X-Razorpay-Signature", "X-Webhook-Signature")


@router.post("/webhooks/payments", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    gateway: PaymentGatewayDep,
    use_case: HandlePaymentCapturedDep,
):
    """Handle payment gateway callbacks; only captures change state."""
    body = await request.body()
    signature = next(
        (request.headers[name] for name in SIGNATURE_HEADERS if name in request.headers),
        None,
    )

    if not gateway.verify_webhook_signature(body, signature):
        logger.warning("Payment webhook signature rejected", gateway=gateway.name)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature",
        )

    try:
        payload = json.loads(body)
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        captured = gateway.parse_webhook_event(payload)
    except ValueError as e:
        raise ValidationError(f"Invalid webhook payload: {e}")

    if captured is None:
        logger.info(
            "Payment webhook ignored",
            gateway=gateway.name,
            webhook_event=payload.get("event"),
        )
        return WebhookAck(status="ignored")

    job = await use_case.execute(
        captured.job_id, captured.payment_reference, amount=captured.amount
    )
    return WebhookAck(status="processed", job_id=job.id)

"""
Mock payment gateway for development and testing.
"""

import hashlib
import hmac
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from jobflow.application.interfaces.gateways import (
    CapturedPayment,
    GatewayHealthStatus,
    PaymentGatewayInterface,
    PaymentIntent,
)
from jobflow.config.logging import get_logger

logger = get_logger(__name__)


class MockPaymentGateway(PaymentGatewayInterface):
    """Gateway that issues local order ids and accepts a simple webhook shape.

    Webhook body::

        {"event": "payment.captured", "job_id": "...",
         "payment_reference": "...", "amount": "100.00"}

    Signatures are checked only when a webhook secret is configured.
    """

    CAPTURED_EVENT = "payment.captured"

    def __init__(self, webhook_secret: Optional[str] = None):
        self.webhook_secret = webhook_secret
        self.orders: Dict[str, Dict[str, Any]] = {}

    @property
    def name(self) -> str:
        return "mock"

    async def create_payment_intent(
        self, amount: Decimal, currency: str, receipt: str, notes: Dict[str, Any]
    ) -> PaymentIntent:
        order_id = f"order_mock_{uuid4().hex[:14]}"
        self.orders[order_id] = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }
        logger.info(
            "Mock payment order created",
            order_id=order_id,
            amount=str(amount),
            receipt=receipt,
        )
        return PaymentIntent(
            order_id=order_id,
            amount=amount,
            currency=currency,
            gateway=self.name,
            receipt=receipt,
        )

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        if not self.webhook_secret:
            return True
        if not signature:
            return False
        expected = hmac.new(
            self.webhook_secret.encode(), body, hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(expected, signature)

    def parse_webhook_event(self, payload: Dict[str, Any]) -> Optional[CapturedPayment]:
        if payload.get("event") != self.CAPTURED_EVENT:
            return None

        try:
            job_id = UUID(str(payload["job_id"]))
            reference = str(payload["payment_reference"])
            amount = payload.get("amount")
            amount = Decimal(str(amount)) if amount is not None else None
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ValueError(f"Malformed payment webhook: {e!r}")

        return CapturedPayment(
            job_id=job_id,
            payment_reference=reference,
            amount=amount,
            order_id=payload.get("order_id"),
        )

    async def health_check(self) -> GatewayHealthStatus:
        return GatewayHealthStatus(
            is_healthy=True,
            status_message="Mock payment gateway is healthy",
            last_check=datetime.now(timezone.utc).isoformat(),
            response_time_ms=0.0,
        )

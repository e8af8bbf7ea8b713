"""
Razorpay payment gateway.

Orders are created through the REST API with basic auth; amounts travel in
the currency's smallest unit (paise). Webhooks are signed with HMAC-SHA256
over the raw body.
"""

import hashlib
import hmac
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from uuid import UUID

import httpx

from jobflow.application.interfaces.gateways import (
    CapturedPayment,
    GatewayHealthStatus,
    PaymentGatewayInterface,
    PaymentIntent,
)
from jobflow.config.logging import get_logger
from jobflow.domain.exceptions.gateway_error import (
    GatewayConfigurationError,
    PaymentGatewayError,
)
from jobflow.infrastructure.external.http_client import HTTPClient

logger = get_logger(__name__)

CAPTURED_EVENTS = ("payment.captured", "order.paid")


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(str(amount)) * 100).to_integral_value())


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))


class RazorpayPaymentGateway(PaymentGatewayInterface):
    """Razorpay payment gateway implementation."""

    def __init__(
        self,
        key_id: Optional[str],
        key_secret: Optional[str],
        webhook_secret: Optional[str],
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 30.0,
    ):
        if not key_id or not key_secret:
            raise GatewayConfigurationError("Razorpay key id and secret are required")
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.base_url = base_url
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "razorpay"

    def _client(self) -> HTTPClient:
        return HTTPClient(
            base_url=self.base_url,
            timeout=self.timeout,
            auth=(self.key_id, self.key_secret),
        )

    async def create_payment_intent(
        self, amount: Decimal, currency: str, receipt: str, notes: Dict[str, Any]
    ) -> PaymentIntent:
        request_data = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }

        try:
            async with self._client() as client:
                response = await client.post("/orders", data=request_data)
        except httpx.TimeoutException:
            raise PaymentGatewayError(self.name, 408, "Request timeout")
        except httpx.RequestError as e:
            raise PaymentGatewayError(self.name, 0, f"Network error: {str(e)}")

        if response.status_code not in (200, 201):
            raise PaymentGatewayError(
                self.name,
                response.status_code,
                f"Failed to create order: {response.text}",
            )

        order = response.json()
        logger.info(
            "Razorpay order created",
            order_id=order["id"],
            amount=str(amount),
            receipt=receipt,
        )
        return PaymentIntent(
            order_id=order["id"],
            amount=from_minor_units(order["amount"]),
            currency=order.get("currency", currency),
            gateway=self.name,
            receipt=order.get("receipt", receipt),
            key_id=self.key_id,
        )

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        if not self.webhook_secret:
            logger.error("Razorpay webhook secret is not configured")
            return False
        if not signature:
            return False
        expected = hmac.new(
            self.webhook_secret.encode(), body, hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(expected, signature)

    def parse_webhook_event(self, payload: Dict[str, Any]) -> Optional[CapturedPayment]:
        if payload.get("event") not in CAPTURED_EVENTS:
            return None

        try:
            payment = payload["payload"]["payment"]["entity"]
            notes = payment.get("notes") or {}
            job_id = UUID(str(notes["job_id"]))
            captured = CapturedPayment(
                job_id=job_id,
                payment_reference=str(payment["id"]),
                amount=(
                    from_minor_units(payment["amount"]) if "amount" in payment else None
                ),
                order_id=payment.get("order_id"),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise ValueError(f"Malformed Razorpay webhook: {e!r}")

        return captured

    async def health_check(self) -> GatewayHealthStatus:
        start_time = time.time()
        now = datetime.now(timezone.utc).isoformat()
        try:
            async with self._client() as client:
                response = await client.get("/orders?count=1")
        except httpx.HTTPError as e:
            return GatewayHealthStatus(
                is_healthy=False,
                status_message="Razorpay API unreachable",
                last_check=now,
                error_details=str(e),
            )

        return GatewayHealthStatus(
            is_healthy=response.status_code == 200,
            status_message=f"Razorpay API responded {response.status_code}",
            last_check=now,
            response_time_ms=(time.time() - start_time) * 1000,
        )

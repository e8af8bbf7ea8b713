"""
Unit tests for payment gateways and the gateway factory.
"""

import hashlib
import hmac
import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest

from jobflow.config.settings import Settings
from jobflow.domain.exceptions.gateway_error import (
    GatewayConfigurationError,
    PaymentGatewayError,
)
from jobflow.infrastructure.payments.factory import (
    PaymentGatewayFactory,
    get_payment_gateway,
)
from jobflow.infrastructure.payments.mock import MockPaymentGateway
from jobflow.infrastructure.payments.razorpay import (
    RazorpayPaymentGateway,
    from_minor_units,
    to_minor_units,
)


def _sign(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestMockPaymentGateway:
    """Test cases for MockPaymentGateway."""

    @pytest.mark.asyncio
    async def test_create_payment_intent(self):
        gateway = MockPaymentGateway()

        intent = await gateway.create_payment_intent(
            Decimal("9800"), "INR", "JOB-20260301-ABCDEF", {"job_id": "x"}
        )

        assert intent.gateway == "mock"
        assert intent.amount == Decimal("9800")
        assert intent.currency == "INR"
        assert intent.order_id in gateway.orders

    def test_unsigned_webhooks_accepted_without_secret(self):
        assert MockPaymentGateway().verify_webhook_signature(b"{}", None) is True

    def test_signature_checked_with_secret(self):
        gateway = MockPaymentGateway(webhook_secret="whsec")
        body = b'{"event": "payment.captured"}'

        assert gateway.verify_webhook_signature(body, _sign("whsec", body)) is True
        assert gateway.verify_webhook_signature(body, _sign("other", body)) is False
        assert gateway.verify_webhook_signature(body, None) is False

    def test_parse_captured_event(self):
        job_id = uuid4()
        captured = MockPaymentGateway().parse_webhook_event(
            {
                "event": "payment.captured",
                "job_id": str(job_id),
                "payment_reference": "pay_1",
                "amount": "9800.00",
            }
        )

        assert captured.job_id == job_id
        assert captured.payment_reference == "pay_1"
        assert captured.amount == Decimal("9800.00")

    def test_other_events_ignored(self):
        assert MockPaymentGateway().parse_webhook_event({"event": "payment.failed"}) is None

    def test_malformed_event(self):
        with pytest.raises(ValueError, match="Malformed"):
            MockPaymentGateway().parse_webhook_event(
                {"event": "payment.captured", "job_id": "not-a-uuid", "payment_reference": "p"}
            )

    def test_non_numeric_amount_is_malformed(self):
        with pytest.raises(ValueError, match="Malformed"):
            MockPaymentGateway().parse_webhook_event(
                {
                    "event": "payment.captured",
                    "job_id": str(uuid4()),
                    "payment_reference": "pay_1",
                    "amount": "lots",
                }
            )

    @pytest.mark.asyncio
    async def test_health_check(self):
        status = await MockPaymentGateway().health_check()
        assert status.is_healthy is True


class TestRazorpayPaymentGateway:
    """Test cases for RazorpayPaymentGateway."""

    @pytest.fixture
    def gateway(self):
        return RazorpayPaymentGateway(
            key_id="rzp_test_key", key_secret="secret", webhook_secret="whsec"
        )

    def _client_returning(self, response=None, error=None):
        client = MagicMock()
        client.post = AsyncMock(return_value=response, side_effect=error)
        client.get = AsyncMock(return_value=response, side_effect=error)
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)
        return client

    def test_minor_units(self):
        assert to_minor_units(Decimal("9800")) == 980000
        assert to_minor_units(Decimal("12.34")) == 1234
        assert from_minor_units(980000) == Decimal("9800.00")

    def test_requires_credentials(self):
        with pytest.raises(GatewayConfigurationError):
            RazorpayPaymentGateway(key_id=None, key_secret="x", webhook_secret=None)

    @pytest.mark.asyncio
    async def test_create_order(self, gateway):
        response = httpx.Response(
            200,
            json={
                "id": "order_Abc123",
                "amount": 980000,
                "currency": "INR",
                "receipt": "JOB-1",
            },
        )
        client = self._client_returning(response)

        with patch.object(gateway, "_client", return_value=client):
            intent = await gateway.create_payment_intent(
                Decimal("9800"), "INR", "JOB-1", {"job_id": "j"}
            )

        assert intent.order_id == "order_Abc123"
        assert intent.amount == Decimal("9800.00")
        assert intent.key_id == "rzp_test_key"
        sent = client.post.await_args.kwargs["data"]
        assert sent["amount"] == 980000
        assert sent["notes"] == {"job_id": "j"}

    @pytest.mark.asyncio
    async def test_create_order_api_error(self, gateway):
        client = self._client_returning(httpx.Response(400, text="bad amount"))

        with patch.object(gateway, "_client", return_value=client):
            with pytest.raises(PaymentGatewayError) as exc_info:
                await gateway.create_payment_intent(Decimal("1"), "INR", "JOB-1", {})

        assert exc_info.value.status_code == 400
        assert exc_info.value.gateway == "razorpay"

    @pytest.mark.asyncio
    async def test_create_order_timeout(self, gateway):
        client = self._client_returning(error=httpx.ReadTimeout("slow"))

        with patch.object(gateway, "_client", return_value=client):
            with pytest.raises(PaymentGatewayError) as exc_info:
                await gateway.create_payment_intent(Decimal("1"), "INR", "JOB-1", {})

        assert exc_info.value.status_code == 408

    def test_webhook_signature(self, gateway):
        body = json.dumps({"event": "payment.captured"}).encode()

        assert gateway.verify_webhook_signature(body, _sign("whsec", body)) is True
        assert gateway.verify_webhook_signature(body, "deadbeef") is False

    def test_webhook_refused_without_secret(self):
        gateway = RazorpayPaymentGateway("k", "s", webhook_secret=None)
        assert gateway.verify_webhook_signature(b"{}", "anything") is False

    def test_parse_captured_payment(self, gateway):
        job_id = uuid4()
        payload = {
            "event": "payment.captured",
            "payload": {
                "payment": {
                    "entity": {
                        "id": "pay_Xyz",
                        "amount": 980000,
                        "order_id": "order_Abc123",
                        "notes": {"job_id": str(job_id)},
                    }
                }
            },
        }

        captured = gateway.parse_webhook_event(payload)

        assert captured.job_id == job_id
        assert captured.payment_reference == "pay_Xyz"
        assert captured.amount == Decimal("9800.00")
        assert captured.order_id == "order_Abc123"

    def test_parse_missing_job_id(self, gateway):
        payload = {"event": "payment.captured", "payload": {"payment": {"entity": {"id": "p"}}}}
        with pytest.raises(ValueError):
            gateway.parse_webhook_event(payload)

    @pytest.mark.parametrize(
        "entity",
        [
            {"amount": 980000},
            {"id": "pay_Xyz", "amount": "n/a"},
        ],
    )
    def test_parse_malformed_payment_entity(self, gateway, entity):
        entity = {**entity, "notes": {"job_id": str(uuid4())}}
        payload = {"event": "payment.captured", "payload": {"payment": {"entity": entity}}}

        with pytest.raises(ValueError, match="Malformed"):
            gateway.parse_webhook_event(payload)

    @pytest.mark.asyncio
    async def test_health_check_unreachable(self, gateway):
        client = self._client_returning(error=httpx.ConnectError("refused"))

        with patch.object(gateway, "_client", return_value=client):
            status = await gateway.health_check()

        assert status.is_healthy is False
        assert "refused" in status.error_details


class TestPaymentGatewayFactory:
    """Test cases for PaymentGatewayFactory."""

    def test_mock_gateway_uses_webhook_secret(self):
        config = Settings(PAYMENT_GATEWAY="mock", RAZORPAY_WEBHOOK_SECRET="whsec")

        gateway = get_payment_gateway(config)

        assert isinstance(gateway, MockPaymentGateway)
        assert gateway.webhook_secret == "whsec"

    def test_razorpay_gateway(self):
        config = Settings(
            PAYMENT_GATEWAY="razorpay",
            RAZORPAY_KEY_ID="rzp_test",
            RAZORPAY_KEY_SECRET="secret",
        )

        assert isinstance(get_payment_gateway(config), RazorpayPaymentGateway)

    def test_unknown_gateway(self):
        with pytest.raises(GatewayConfigurationError):
            PaymentGatewayFactory().create_gateway("paypal")

    def test_available_gateways(self):
        assert PaymentGatewayFactory().get_available_gateways() == ["mock", "razorpay"]

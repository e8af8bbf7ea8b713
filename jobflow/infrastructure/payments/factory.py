"""
Payment gateway factory.
"""

from typing import Callable, Dict

from jobflow.application.interfaces.gateways import PaymentGatewayInterface
from jobflow.config.settings import Settings, settings
from jobflow.domain.exceptions.gateway_error import GatewayConfigurationError
from jobflow.infrastructure.payments.mock import MockPaymentGateway
from jobflow.infrastructure.payments.razorpay import RazorpayPaymentGateway


def _mock(config: Settings) -> PaymentGatewayInterface:
    return MockPaymentGateway(webhook_secret=config.RAZORPAY_WEBHOOK_SECRET)


def _razorpay(config: Settings) -> PaymentGatewayInterface:
    return RazorpayPaymentGateway(
        key_id=config.RAZORPAY_KEY_ID,
        key_secret=config.RAZORPAY_KEY_SECRET,
        webhook_secret=config.RAZORPAY_WEBHOOK_SECRET,
        base_url=config.RAZORPAY_BASE_URL,
        timeout=config.PAYMENT_GATEWAY_TIMEOUT,
    )


class PaymentGatewayFactory:
    """Factory for creating payment gateway instances."""

    def __init__(self):
        self._gateways: Dict[str, Callable[[Settings], PaymentGatewayInterface]] = {
            "mock": _mock,
            "razorpay": _razorpay,
        }

    def create_gateway(self, name: str, config: Settings = settings) -> PaymentGatewayInterface:
        """Create a gateway instance by name."""
        builder = self._gateways.get(name.lower())
        if not builder:
            raise GatewayConfigurationError(f"Payment gateway '{name}' not supported")
        return builder(config)

    def register_gateway(
        self, name: str, builder: Callable[[Settings], PaymentGatewayInterface]
    ) -> None:
        """Register a new gateway type."""
        self._gateways[name.lower()] = builder

    def get_available_gateways(self) -> list[str]:
        return list(self._gateways.keys())


def get_payment_gateway(config: Settings = settings) -> PaymentGatewayInterface:
    """Build the gateway selected by ``PAYMENT_GATEWAY``."""
    return PaymentGatewayFactory().create_gateway(config.PAYMENT_GATEWAY, config)

"""
Gateway interfaces for external collaborators.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID


@dataclass
class PaymentIntent:
    """Order created at the payment gateway for a dealer to pay."""

    order_id: str
    amount: Decimal
    currency: str
    gateway: str
    receipt: Optional[str] = None
    key_id: Optional[str] = None


@dataclass
class CapturedPayment:
    """Payment the gateway reports as captured."""

    job_id: UUID
    payment_reference: str
    amount: Optional[Decimal] = None
    order_id: Optional[str] = None


@dataclass
class GatewayHealthStatus:
    """Gateway health status information."""

    is_healthy: bool
    status_message: str
    last_check: str
    response_time_ms: Optional[float] = None
    error_details: Optional[str] = None


class PaymentGatewayInterface(ABC):
    """Base interface for payment gateways."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway name."""
        pass

    @abstractmethod
    async def create_payment_intent(
        self, amount: Decimal, currency: str, receipt: str, notes: Dict[str, Any]
    ) -> PaymentIntent:
        """Create an order for ``amount`` the dealer will pay."""
        pass

    @abstractmethod
    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """Check a webhook body against its signature header."""
        pass

    @abstractmethod
    def parse_webhook_event(self, payload: Dict[str, Any]) -> Optional[CapturedPayment]:
        """Extract a captured payment from a webhook body, ``None`` for other events."""
        pass

    @abstractmethod
    async def health_check(self) -> GatewayHealthStatus:
        """Check gateway health and connectivity."""
        pass


class NotificationPublisherInterface(ABC):
    """Delivers domain events to the notification service."""

    @abstractmethod
    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Publish one event. Raises on delivery failure so it can be retried."""
        pass

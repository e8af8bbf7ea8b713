"""
External gateway exceptions.
"""


class GatewayError(Exception):
    """Base exception for payment gateway and notification errors."""

    pass


class GatewayConfigurationError(GatewayError):
    """Raised when gateway configuration is invalid."""

    pass


class PaymentGatewayError(GatewayError):
    """Raised when the payment gateway returns an error."""

    def __init__(self, gateway: str, status_code: int, message: str):
        self.gateway = gateway
        self.status_code = status_code
        self.message = message
        super().__init__(f"Payment gateway {gateway} error ({status_code}): {message}")


class NotificationDeliveryError(GatewayError):
    """Raised when an event could not be delivered to the notification service."""

    def __init__(self, event_name: str, message: str):
        self.event_name = event_name
        self.message = message
        super().__init__(f"Failed to deliver {event_name}: {message}")

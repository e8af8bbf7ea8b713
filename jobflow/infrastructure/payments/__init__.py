"""
Payment gateways package.
"""

from .factory import PaymentGatewayFactory, get_payment_gateway
from .mock import MockPaymentGateway
from .razorpay import RazorpayPaymentGateway

__all__ = [
    "MockPaymentGateway",
    "PaymentGatewayFactory",
    "RazorpayPaymentGateway",
    "get_payment_gateway",
]

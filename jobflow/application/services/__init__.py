"""
Application services package.
"""

from .retry_handler import CircuitOpenError, RetryHandler
from .transactional_outbox import OutboxEventType, TransactionalOutbox
from .visibility_gate import BidView, JobView, VisibilityGate

__all__ = [
    "BidView",
    "CircuitOpenError",
    "JobView",
    "OutboxEventType",
    "RetryHandler",
    "TransactionalOutbox",
    "VisibilityGate",
]

"""
Notification publishers package.
"""

from .publisher import (
    LoggingNotificationPublisher,
    WebhookNotificationPublisher,
    get_notification_publisher,
)

__all__ = [
    "LoggingNotificationPublisher",
    "WebhookNotificationPublisher",
    "get_notification_publisher",
]

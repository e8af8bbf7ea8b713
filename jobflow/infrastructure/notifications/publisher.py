"""
Notification publishers for outbox events.
"""

from typing import Any, Dict

import httpx

from jobflow.application.interfaces.gateways import NotificationPublisherInterface
from jobflow.config.logging import get_logger
from jobflow.config.settings import Settings, settings
from jobflow.domain.exceptions.gateway_error import NotificationDeliveryError
from jobflow.infrastructure.external.http_client import HTTPClient

logger = get_logger(__name__)


class WebhookNotificationPublisher(NotificationPublisherInterface):
    """Posts each event as JSON to the notification service."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        body = {"event": event_name, "data": payload}
        try:
            async with HTTPClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url, data=body, headers={"X-Event-Name": event_name}
                )
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(event_name, str(e))

        if response.status_code >= 400:
            raise NotificationDeliveryError(
                event_name, f"HTTP {response.status_code}: {response.text[:200]}"
            )


class LoggingNotificationPublisher(NotificationPublisherInterface):
    """Writes events to the log; used when no notification service is configured."""

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        logger.info("Notification event", event_name=event_name, payload=payload)


def get_notification_publisher(config: Settings = settings) -> NotificationPublisherInterface:
    if config.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotificationPublisher(
            config.NOTIFICATION_WEBHOOK_URL, timeout=config.NOTIFICATION_TIMEOUT
        )
    return LoggingNotificationPublisher()

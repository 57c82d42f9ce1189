"""
Webhook client for delivering notifications.

Each notification is a single JSON POST. There are no retries: one attempt,
success or failure, decides the outcome.
"""

import logging
from typing import Optional

import httpx

from .models import Notification

logger = logging.getLogger(__name__)


class WebhookDeliveryError(Exception):
    """Raised when a webhook POST fails or returns a non-2xx status."""
    pass


class WebhookClient:
    """
    Client for posting notifications to webhooks.

    Usage:
        client = WebhookClient(timeout=10.0)
        await client.send(notification)
        await client.close()
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "hookrelay/0.3",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize webhook client.

        Args:
            timeout: HTTP request timeout in seconds
            user_agent: User-Agent header value
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": user_agent},
        )

    async def send(self, notification: Notification) -> None:
        """
        Deliver one notification.

        Args:
            notification: Notification to send

        Raises:
            WebhookDeliveryError: If the request fails or is rejected
        """
        try:
            response = await self.client.post(
                notification.endpoint,
                json=notification.to_payload(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Webhook rejected {notification.kind.value} notification: "
                f"HTTP {e.response.status_code}"
            )
            raise WebhookDeliveryError(
                f"Request failed with status code {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send {notification.kind.value} notification: {e!r}"
            )
            raise WebhookDeliveryError(str(e) or e.__class__.__name__) from e
        except httpx.InvalidURL as e:
            logger.error(
                f"Cannot send {notification.kind.value} notification: {e}"
            )
            raise WebhookDeliveryError(f"Invalid webhook URL: {e}") from e

        logger.debug(f"Sent {notification.kind.value} notification")

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self.close()

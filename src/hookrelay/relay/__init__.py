"""
Relay module.

Validates submissions and forwards them to the operator webhook and to
registered relay pages.
"""

from hookrelay.relay.client import WebhookClient, WebhookDeliveryError
from hookrelay.relay.models import (
    Ack,
    DirectoryRequest,
    Notification,
    NotificationKind,
    RegistrationResult,
    SubmissionPayload,
    is_webhook_url,
)
from hookrelay.relay.service import RelayService

__all__ = [
    "Ack",
    "DirectoryRequest",
    "Notification",
    "NotificationKind",
    "RegistrationResult",
    "RelayService",
    "SubmissionPayload",
    "WebhookClient",
    "WebhookDeliveryError",
    "is_webhook_url",
]

"""
Relay request and response models.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

# Discord webhook URLs under either of its two hostnames.
WEBHOOK_URL_PATTERN = re.compile(
    r"^https://(discord\.com|discordapp\.com)/api/webhooks/"
)
WEBHOOK_URL_ERROR = "Must be a valid Discord webhook URL"

MESSAGE_MAX_LENGTH = 2000

DIRECTORY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def is_webhook_url(value: str) -> bool:
    """
    Check a URL against the allow-listed webhook pattern.

    The value must also parse as an absolute URL that the webhook client
    can send to.
    """
    if any(ch.isspace() for ch in value):
        return False
    if WEBHOOK_URL_PATTERN.match(value) is None:
        return False
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.is_absolute_url and bool(url.host)


def _check_webhook_url(value: str) -> str:
    if not is_webhook_url(value):
        raise PydanticCustomError("webhook_url", WEBHOOK_URL_ERROR)
    return value


class SubmissionPayload(BaseModel):
    """Form submission relayed to webhooks."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(..., alias="sourceUrl")
    message: str

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str) -> str:
        return _check_webhook_url(v)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if len(v) < 1:
            raise PydanticCustomError("message_required", "Message is required")
        if len(v) > MESSAGE_MAX_LENGTH:
            raise PydanticCustomError("message_too_long", "Message too long")
        return v


class DirectoryRequest(BaseModel):
    """Request to register a relay page."""

    model_config = ConfigDict(frozen=True)

    directory_name: str = Field(..., alias="directoryName")
    webhook: str

    @field_validator("directory_name", "webhook", mode="before")
    @classmethod
    def require_value(cls, v: Any) -> Any:
        # Empty strings count as missing
        if v is None or v == "":
            raise PydanticCustomError("missing", "Field required")
        return v

    @field_validator("directory_name")
    @classmethod
    def validate_directory_name(cls, v: str) -> str:
        if not DIRECTORY_NAME_PATTERN.match(v):
            raise PydanticCustomError(
                "directory_name",
                "Directory name may only use letters, numbers, '-' and '_' "
                "(up to 64 characters)",
            )
        return v

    @field_validator("webhook")
    @classmethod
    def validate_webhook(cls, v: str) -> str:
        return _check_webhook_url(v)


class Ack(BaseModel):
    """Successful relay acknowledgment."""

    success: bool = True


class RegistrationResult(BaseModel):
    """Successful directory registration."""

    success: bool = True
    message: str = "Dualhook created successfully"
    url: str
    name: str = Field(..., exclude=True)


def field_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    """
    Flatten a ValidationError into field-level error records.

    Args:
        exc: Validation error raised by a model

    Returns:
        List of {"field", "message", "type"} dicts
    """
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        errors.append(
            {
                "field": loc or None,
                "message": err.get("msg", "Invalid value"),
                "type": err.get("type", "value_error"),
            }
        )
    return errors


class NotificationKind(str, Enum):
    """What triggered a notification."""
    DIRECT = "direct"
    DIRECTORY_OWNER = "directory_owner"
    DIRECTORY_OPERATOR = "directory_operator"
    CONFIRMATION = "confirmation"


@dataclass
class Notification:
    """
    Message to deliver to one webhook.

    Attributes:
        endpoint: Webhook URL
        content: Message text
        kind: What triggered the notification
    """
    endpoint: str
    content: str
    kind: NotificationKind = NotificationKind.DIRECT

    def to_payload(self) -> Dict[str, Any]:
        """Webhook request body."""
        return {"content": self.content}

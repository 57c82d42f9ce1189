"""
Error taxonomy for relay operations.

Every error knows the HTTP status it maps to and the JSON body returned to
the caller. They are raised by the service layer and converted to responses
by the exception handlers in ``hookrelay.ui.http_server``.
"""

from typing import Any, Dict, List, Optional


class RelayError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        """Build the JSON response body."""
        return {"message": self.message}


class InvalidInput(RelayError):
    """Payload failed schema validation."""

    status_code = 400
    default_message = "Invalid input"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.errors = errors or []

    def to_response(self) -> Dict[str, Any]:
        body = super().to_response()
        if self.errors:
            body["errors"] = self.errors
        return body


class AlreadyExists(RelayError):
    """Directory name is already registered."""

    status_code = 400
    default_message = (
        "This directory name is already taken. Please choose a different name."
    )

    def __init__(self, name: str):
        super().__init__()
        self.name = name


class RateLimited(RelayError):
    """Client submitted again inside its cooldown window."""

    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded. Please try again in {retry_after} seconds."
        )


class DeliveryFailed(RelayError):
    """Outbound webhook delivery failed."""

    status_code = 500
    default_message = "Failed to forward message"

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(message)
        self.error = error

    def to_response(self) -> Dict[str, Any]:
        return {"message": self.message, "error": self.error}


class Unexpected(RelayError):
    """Catch-all for failures outside the taxonomy."""

    status_code = 500

"""
Notification formatters - turn submissions into webhook messages.
"""

from .models import Notification, NotificationKind, SubmissionPayload


def _submission_body(payload: SubmissionPayload) -> str:
    return f"Source URL: {payload.source_url}\nMessage: {payload.message}"


def build_direct_notification(
    payload: SubmissionPayload,
    operator_endpoint: str,
) -> Notification:
    """
    Build the operator notification for a submission made on the main page.

    Args:
        payload: Validated submission
        operator_endpoint: Operator webhook URL

    Returns:
        Notification instance
    """
    return Notification(
        endpoint=operator_endpoint,
        content=f"New submission\n\n{_submission_body(payload)}",
        kind=NotificationKind.DIRECT,
    )


def build_directory_owner_notification(
    payload: SubmissionPayload,
    owner_endpoint: str,
) -> Notification:
    """Build the notification sent to the owner of a relay page."""
    return Notification(
        endpoint=owner_endpoint,
        content=f"New submission via your page\n\n{_submission_body(payload)}",
        kind=NotificationKind.DIRECTORY_OWNER,
    )


def build_directory_operator_notification(
    payload: SubmissionPayload,
    directory_name: str,
    operator_endpoint: str,
) -> Notification:
    """Build the operator copy of a submission made on a relay page."""
    return Notification(
        endpoint=operator_endpoint,
        content=(
            f"New submission via /{directory_name}\n\n{_submission_body(payload)}"
        ),
        kind=NotificationKind.DIRECTORY_OPERATOR,
    )


def build_confirmation_notification(endpoint: str, page_url: str) -> Notification:
    """Build the one-time confirmation sent after a page is registered."""
    return Notification(
        endpoint=endpoint,
        content=f"Your relay page is ready: {page_url}",
        kind=NotificationKind.CONFIRMATION,
    )

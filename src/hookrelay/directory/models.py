"""
Directory data models.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DirectoryRegistration(BaseModel):
    """
    A registered relay page.

    Created once on successful registration and never modified.
    """

    name: str = Field(..., description="Path segment chosen by the registrant")
    endpoint: str = Field(..., description="Webhook that receives this page's submissions")
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="When the directory was registered",
    )

    model_config = {"frozen": True}


class DirectoryContext(BaseModel):
    """Context injected into the HTML shell for a registered directory."""

    name: str
    submit_path: str
    title: str

"""
Resolves the first URL path segment to a registered directory.
"""

import logging
from typing import FrozenSet, Optional

from .models import DirectoryContext
from .store import DirectoryRegistry

logger = logging.getLogger(__name__)

# Path segments owned by the application's own routing.
RESERVED_SEGMENTS: FrozenSet[str] = frozenset(
    {
        "api",
        "assets",
        "_app",
        "static",
        "health",
        "docs",
        "redoc",
        "openapi.json",
        "favicon.ico",
    }
)

DEFAULT_SUBMIT_PATH = "/api/webhook"


def submit_path_for(name: str) -> str:
    """Submission route used by pages served for a directory."""
    return f"/api/{name}/webhook"


class DirectoryResolver:
    """
    Decides whether a request path names a registered directory.

    Resolution is read-only: looking up an unknown segment never creates a
    registry entry.
    """

    def __init__(
        self,
        registry: DirectoryRegistry,
        app_title: str = "Webhook Relay",
        reserved: FrozenSet[str] = RESERVED_SEGMENTS,
    ):
        self.registry = registry
        self.app_title = app_title
        self.reserved = reserved

    def is_reserved(self, segment: str) -> bool:
        return segment in self.reserved

    def resolve(self, segment: str) -> Optional[DirectoryContext]:
        """
        Resolve a path segment.

        Args:
            segment: First path segment of the request

        Returns:
            Directory context, or None if the request should fall through
            to normal routing
        """
        if not segment or self.is_reserved(segment):
            return None

        if not self.registry.exists(segment):
            logger.debug(f"Segment '{segment}' is not a registered directory")
            return None

        return DirectoryContext(
            name=segment,
            submit_path=submit_path_for(segment),
            title=f"{self.app_title} - {segment}",
        )

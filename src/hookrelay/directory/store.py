"""
In-memory directory registry.
"""

import logging
import threading
from typing import Dict, Optional

from hookrelay.core.errors import AlreadyExists

from .models import DirectoryRegistration

logger = logging.getLogger(__name__)


class DirectoryRegistry:
    """
    Maps directory names to registered webhook endpoints.

    Entries live for the lifetime of the process. There is no update or
    removal operation. Endpoint validation is the caller's job.
    """

    def __init__(self):
        self._entries: Dict[str, DirectoryRegistration] = {}
        self._lock = threading.Lock()

    def exists(self, name: str) -> bool:
        """
        Check whether a directory name has been registered.

        Args:
            name: Directory name (case-sensitive)

        Returns:
            True if the name is taken
        """
        return name in self._entries

    def register(self, name: str, endpoint: str) -> DirectoryRegistration:
        """
        Register a new directory.

        The existence check and the insert happen under one lock, so of two
        concurrent registrations for the same name exactly one succeeds.

        Args:
            name: Directory name
            endpoint: Webhook URL for the directory

        Returns:
            The stored registration

        Raises:
            AlreadyExists: If the name is already registered
        """
        with self._lock:
            if name in self._entries:
                logger.info(f"Directory name '{name}' already taken")
                raise AlreadyExists(name)
            registration = DirectoryRegistration(name=name, endpoint=endpoint)
            self._entries[name] = registration

        logger.info(f"Registered directory '{name}' ({len(self._entries)} total)")
        return registration

    def lookup(self, name: str) -> Optional[str]:
        """
        Get the endpoint registered for a directory.

        Args:
            name: Directory name

        Returns:
            Endpoint URL or None if not registered
        """
        registration = self._entries.get(name)
        return registration.endpoint if registration else None

    def __len__(self) -> int:
        return len(self._entries)

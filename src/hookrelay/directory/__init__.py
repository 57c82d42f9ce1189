"""
Directory module.

Self-registered relay pages: the registry of names to webhooks and the
resolver that maps request paths onto it.
"""

from .models import DirectoryContext, DirectoryRegistration
from .resolver import RESERVED_SEGMENTS, DirectoryResolver, submit_path_for
from .store import DirectoryRegistry

__all__ = [
    "DirectoryContext",
    "DirectoryRegistration",
    "DirectoryRegistry",
    "DirectoryResolver",
    "RESERVED_SEGMENTS",
    "submit_path_for",
]

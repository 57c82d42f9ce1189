"""
Throttle module.

Per-client cooldown applied before every relay operation.
"""

from .limiter import SubmissionThrottle
from .models import ThrottleEntry

__all__ = ["SubmissionThrottle", "ThrottleEntry"]

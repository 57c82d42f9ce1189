"""
Throttle data models.
"""

from dataclasses import dataclass


@dataclass
class ThrottleEntry:
    """
    Last accepted submission for one client.

    Attributes:
        last_submission_time: Clock reading of the last accepted submission
    """
    last_submission_time: float

    def elapsed(self, now: float) -> float:
        return now - self.last_submission_time

"""
Per-client submission cooldown.

Best-effort spam control keyed on the client address. The key is easy to
spoof, so this is not a security boundary.
"""

import logging
import math
import threading
import time
from typing import Callable, Dict, Optional

from hookrelay.core.errors import RateLimited

from .models import ThrottleEntry

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 25.0
DEFAULT_RETENTION_SECONDS = 3600.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


class SubmissionThrottle:
    """
    Enforces a fixed cooldown between accepted submissions per client.

    Stale entries are swept inline from ``try_accept`` at most once every
    ``sweep_interval`` seconds, so memory stays bounded without a background
    task.

    Usage:
        throttle = SubmissionThrottle()
        try:
            throttle.try_accept("203.0.113.7")
        except RateLimited as e:
            print(e.retry_after)
    """

    def __init__(
        self,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        retention: float = DEFAULT_RETENTION_SECONDS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize throttle.

        Args:
            cooldown: Seconds a client must wait between accepted submissions
            retention: Entries idle longer than this are evicted by a sweep
            sweep_interval: Minimum seconds between inline sweeps
            clock: Monotonic clock returning seconds
        """
        if retention < cooldown:
            raise ValueError("retention must be >= cooldown")

        self.cooldown = cooldown
        self.retention = retention
        self.sweep_interval = sweep_interval
        self.clock = clock

        self._entries: Dict[str, ThrottleEntry] = {}
        self._lock = threading.Lock()
        self._last_sweep: Optional[float] = None

    def try_accept(self, client_key: str, now: Optional[float] = None) -> None:
        """
        Accept or reject a submission from a client.

        On acceptance the client's last submission time becomes ``now``.

        Args:
            client_key: Client identifier
            now: Clock reading in seconds (defaults to the throttle clock)

        Raises:
            RateLimited: If the client is still inside its cooldown
        """
        if now is None:
            now = self.clock()

        with self._lock:
            entry = self._entries.get(client_key)
            if entry is not None:
                elapsed = entry.elapsed(now)
                if elapsed < self.cooldown:
                    retry_after = max(1, math.ceil(self.cooldown - elapsed))
                    logger.info(
                        f"Throttled {client_key}: retry in {retry_after}s"
                    )
                    raise RateLimited(retry_after)
                entry.last_submission_time = now
            else:
                self._entries[client_key] = ThrottleEntry(now)

            if self._last_sweep is None:
                self._last_sweep = now
            elif now - self._last_sweep >= self.sweep_interval:
                self._sweep_locked(now)

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Evict entries idle for longer than the retention window.

        Since retention is never shorter than the cooldown, an entry that
        would still reject a submission is never evicted.

        Args:
            now: Clock reading in seconds (defaults to the throttle clock)

        Returns:
            Number of entries evicted
        """
        if now is None:
            now = self.clock()
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        stale = [
            key
            for key, entry in self._entries.items()
            if entry.elapsed(now) > self.retention
        ]
        for key in stale:
            del self._entries[key]

        self._last_sweep = now
        if stale:
            logger.debug(
                f"Swept {len(stale)} throttle entries, {len(self._entries)} remain"
            )
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)

"""Single-value cache with an expiry timestamp and an injectable clock."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CachedValue(Generic[T]):
    """A cached value and the clock reading after which it is stale."""
    value: T
    cached_at: float
    expires_at: float


class TTLCache(Generic[T]):
    """
    Holds one value for a fixed time-to-live.

    The clock is injected so expiry can be driven deterministically in tests;
    it defaults to ``time.monotonic``.
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Callable[[], float]] = None):
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entry: Optional[CachedValue[T]] = None

    def get(self) -> Optional[T]:
        """Return the cached value, or None when empty or expired."""
        entry = self._entry
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            logger.debug("Cache entry expired")
            self._entry = None
            return None
        return entry.value

    def set(self, value: T) -> None:
        now = self._clock()
        self._entry = CachedValue(value=value, cached_at=now, expires_at=now + self.ttl_seconds)

    def clear(self) -> None:
        self._entry = None

    @property
    def ttl_remaining(self) -> float:
        if self._entry is None:
            return 0.0
        return max(0.0, self._entry.expires_at - self._clock())

    def stats(self) -> dict[str, Any]:
        return {
            "has_value": self._entry is not None,
            "ttl_remaining": self.ttl_remaining,
        }

"""Fixed-window per-client rate limiter used for job admission.

State is process-local: one window counter per client id, replaced when its
window has elapsed and swept by ``cleanup()``.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class RateLimitEntry:
    count: int
    reset_time: datetime


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: datetime


class RateLimiter:
    """Counts requests per client inside a fixed window.

    Defaults: 10 requests per 60 second window.
    """

    def __init__(
        self,
        window_seconds: float = 60,
        max_requests: int = 10,
        clock: Callable[[], datetime] | None = None,
    ):
        self.window = timedelta(seconds=window_seconds)
        self.max_requests = max_requests
        self._clock = clock or _utcnow
        self._entries: dict[str, RateLimitEntry] = {}

    def check_limit(self, client_id: str) -> RateLimitResult:
        """Count one request for client_id and report whether it is admitted."""
        now = self._clock()
        entry = self._entries.get(client_id)

        if entry is None or entry.reset_time <= now:
            reset_time = now + self.window
            self._entries[client_id] = RateLimitEntry(count=1, reset_time=reset_time)
            return RateLimitResult(allowed=True, remaining=self.max_requests - 1, reset_time=reset_time)

        if entry.count >= self.max_requests:
            logger.info("rate_limit_exceeded", client_id=client_id, reset_time=entry.reset_time.isoformat())
            return RateLimitResult(allowed=False, remaining=0, reset_time=entry.reset_time)

        entry.count += 1
        return RateLimitResult(
            allowed=True,
            remaining=self.max_requests - entry.count,
            reset_time=entry.reset_time,
        )

    def retry_after_seconds(self, result: RateLimitResult) -> int:
        """Whole seconds until the client's window resets (at least 1)."""
        seconds = (result.reset_time - self._clock()).total_seconds()
        return max(1, math.ceil(seconds))

    def cleanup(self) -> int:
        """Delete entries whose window has elapsed. Returns number removed."""
        now = self._clock()
        expired = [client_id for client_id, entry in self._entries.items() if entry.reset_time <= now]
        for client_id in expired:
            del self._entries[client_id]

        if expired:
            logger.debug("rate_limit_entries_cleaned", cleaned=len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

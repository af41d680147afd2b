"""Rate limiting utilities shared by every request a client sends."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from ..cancellation import sleep_or_cancel
from ..config import (
    RATE_LIMIT_BACKOFF_INITIAL,
    RATE_LIMIT_BACKOFF_MAX,
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_LIMIT_HEADER,
    RATE_LIMIT_MAX_RETRIES,
    RATE_LIMIT_MIN_DELAY,
    RATE_LIMIT_USAGE_HEADER,
    RATE_LIMIT_WINDOW_SECONDS,
)
from ..errors import is_rate_limit_error
from ..models import RateLimitInfo

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["RateLimiter", "parse_rate_limit_headers"]


class RateLimiter:
    """Quota-aware pacing with a global minimum spacing between requests."""

    def __init__(
        self,
        enabled: bool = RATE_LIMIT_ENABLED,
        min_delay: float = RATE_LIMIT_MIN_DELAY,
        max_retries: int = RATE_LIMIT_MAX_RETRIES,
        backoff_initial: float = RATE_LIMIT_BACKOFF_INITIAL,
        backoff_max: float = RATE_LIMIT_BACKOFF_MAX,
    ) -> None:
        if min_delay < 0:
            raise ValueError("min_delay must be >= 0")
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._lock = threading.Lock()
        self._enabled = enabled
        self._min_delay = min_delay
        self._max_retries = max_retries
        self._backoff_initial = backoff_initial
        self._backoff_max = backoff_max
        self._limit = 0
        self._usage = 0
        self._reset: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def wait(self, cancel: Optional[threading.Event] = None) -> None:
        """Block until the next request may be sent.

        The lock is held across both sleeps so the minimum delay spaces
        requests from all threads, not per caller.
        """

        if not self._enabled:
            return
        with self._lock:
            if self._limit > 0 and self._usage >= self._limit:
                wait_for = 0.0 if self._reset is None else self._reset - time.time()
                if wait_for > 0:
                    LOGGER.info(
                        "Quota exhausted (%s/%s); waiting %.1fs for window reset",
                        self._usage,
                        self._limit,
                        wait_for,
                    )
                    sleep_or_cancel(wait_for, cancel)
                if self._reset is not None:
                    self._usage = 0
            sleep_or_cancel(self._min_delay, cancel)

    def update(self, info: RateLimitInfo) -> None:
        """Record quota telemetry; absent or zero fields leave state unchanged."""

        if not self._enabled:
            return
        with self._lock:
            if info.limit is not None and info.limit > 0:
                self._limit = info.limit
            if info.usage is not None and info.usage > 0:
                self._usage = info.usage
            if info.reset is not None and info.reset > 0:
                self._reset = info.reset

    def retry_with_backoff(
        self,
        operation: Callable[[], T],
        cancel: Optional[threading.Event] = None,
    ) -> T:
        """Run ``operation``, retrying rate-limited failures with backoff.

        Other exceptions propagate on first occurrence. After ``max_retries``
        retries the last rate-limit error is re-raised.
        """

        if not self._enabled:
            return operation()
        backoff = self._backoff_initial
        attempt = 0
        while True:
            try:
                return operation()
            except Exception as exc:
                if not is_rate_limit_error(exc) or attempt >= self._max_retries:
                    raise
                attempt += 1
                LOGGER.warning(
                    "Rate limited (429); retry %s/%s in %.1fs",
                    attempt,
                    self._max_retries,
                    backoff,
                )
            sleep_or_cancel(backoff, cancel)
            backoff = min(backoff * 2, self._backoff_max)

    def snapshot(self) -> Dict[str, Any]:
        """Return a consistent copy of the limiter state."""

        with self._lock:
            return {
                "enabled": self._enabled,
                "limit": self._limit,
                "usage": self._usage,
                "reset": self._reset,
                "min_delay": self._min_delay,
                "max_retries": self._max_retries,
            }


def _first_int(value: object) -> Optional[int]:
    try:
        return int(str(value).split(",")[0].strip())
    except (ValueError, TypeError):
        return None


def parse_rate_limit_headers(
    headers: Optional[Mapping[str, object]],
    now: Optional[float] = None,
    window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
    limit_header: str = RATE_LIMIT_LIMIT_HEADER,
    usage_header: str = RATE_LIMIT_USAGE_HEADER,
) -> RateLimitInfo:
    """Extract the short-window quota from ``short,long`` headers.

    Strava's short window resets on UTC quarter hours, so the reset instant is
    the next multiple of ``window_seconds`` whenever a quota header is seen.
    """

    if not headers:
        return RateLimitInfo()
    raw_limit = headers.get(limit_header)
    raw_usage = headers.get(usage_header)
    limit = _first_int(raw_limit) if raw_limit else None
    usage = _first_int(raw_usage) if raw_usage else None
    if (raw_limit and limit is None) or (raw_usage and usage is None):
        LOGGER.debug(
            "Failed to parse rate limit headers usage=%s limit=%s",
            raw_usage,
            raw_limit,
        )
    reset = None
    if (limit is not None or usage is not None) and window_seconds > 0:
        current = time.time() if now is None else now
        reset = float(math.floor(current / window_seconds + 1) * window_seconds)
    return RateLimitInfo(limit=limit, usage=usage, reset=reset)

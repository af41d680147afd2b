"""Strava API client facade.

Public surface:
- StravaClient(access_token=None, token_manager=None, options=None)
- get_default_client()
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from .auth import StaticTokenSource, TokenManager
from .config import (
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_MAX_RETRIES,
    RATE_LIMIT_MIN_DELAY,
    ClientOptions,
)
from .models import JSON
from .services import (
    ActivitiesService,
    AthletesService,
    ClubsService,
    GearService,
    RoutesService,
    SegmentEffortsService,
    SegmentsService,
    StreamsService,
    UploadsService,
)
from .strava_client import Dispatcher, RateLimiter, create_default_session

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _pick(value: Optional[T], default: T) -> T:
    return default if value is None else value


class StravaClient:
    """One session, one rate limiter and one token source shared by all calls.

    Pass ``token_manager`` for refreshing OAuth credentials, or a plain
    ``access_token`` for a fixed bearer token.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        *,
        token_manager: Optional[TokenManager] = None,
        options: Optional[ClientOptions] = None,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        opts = options or ClientOptions()
        if token_manager is not None and access_token:
            raise ValueError("pass either access_token or token_manager, not both")
        self._static_token: Optional[StaticTokenSource] = None
        if token_manager is None:
            self._static_token = StaticTokenSource(access_token or "")
        self.token_manager = token_manager
        self.session = opts.session or create_default_session()
        self.limiter = limiter or RateLimiter(
            enabled=_pick(opts.rate_limit_enabled, RATE_LIMIT_ENABLED),
            min_delay=_pick(opts.min_delay, RATE_LIMIT_MIN_DELAY),
            max_retries=_pick(opts.max_retries, RATE_LIMIT_MAX_RETRIES),
        )
        self.dispatcher = Dispatcher(
            token_manager or self._static_token,
            session=self.session,
            limiter=self.limiter,
            base_url=opts.resolved_base_url(),
            timeout=opts.resolved_timeout(),
        )

        self.activities = ActivitiesService(self.dispatcher)
        self.athletes = AthletesService(self.dispatcher)
        self.clubs = ClubsService(self.dispatcher)
        self.gear = GearService(self.dispatcher)
        self.routes = RoutesService(self.dispatcher)
        self.segments = SegmentsService(self.dispatcher)
        self.segment_efforts = SegmentEffortsService(self.dispatcher)
        self.streams = StreamsService(self.dispatcher)
        self.uploads = UploadsService(self.dispatcher)

    def set_access_token(self, access_token: str) -> None:
        """Replace the fixed bearer token (clients without a token manager only)."""

        if self._static_token is None:
            raise ValueError("client uses a token manager; call update_token on it")
        self._static_token.set_access_token(access_token)

    def perform(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        result: Any = JSON,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        return self.dispatcher.perform(method, path, params, body, result, cancel)

    def retry_with_backoff(
        self,
        operation: Callable[[], T],
        cancel: Optional[threading.Event] = None,
    ) -> T:
        """Run ``operation`` retrying 429 responses with exponential backoff."""

        return self.limiter.retry_with_backoff(operation, cancel)

    def rate_limit(self) -> Dict[str, Any]:
        return self.limiter.snapshot()


_default_client: Optional[StravaClient] = None
_default_lock = threading.Lock()


def get_default_client() -> StravaClient:
    """Return a module-wide client built from ``STRAVA_ACCESS_TOKEN``."""

    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = StravaClient(os.getenv("STRAVA_ACCESS_TOKEN", ""))
        return _default_client


__all__ = ["StravaClient", "get_default_client"]

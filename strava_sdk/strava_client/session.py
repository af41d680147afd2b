"""Pooled ``requests`` session shared by every call a client makes."""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import HTTP_POOL_CONNECTIONS, HTTP_POOL_MAXSIZE

__all__ = ["create_default_session", "transport_retry"]


def transport_retry() -> Retry:
    """Adapter policy that sends every request exactly once.

    Each attempt must pass through ``RateLimiter.wait`` and feed its quota
    headers back to ``update``, so replays belong to
    ``RateLimiter.retry_with_backoff``, never to the adapter.
    """

    return Retry(total=0, read=False, redirect=False, raise_on_status=False)


def create_default_session(
    pool_connections: int = HTTP_POOL_CONNECTIONS,
    pool_maxsize: int = HTTP_POOL_MAXSIZE,
) -> requests.Session:
    adapter = HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=transport_retry(),
    )
    session = requests.Session()
    for scheme in ("https://", "http://"):
        session.mount(scheme, adapter)
    session.headers["Accept"] = "application/json"
    session.headers["Accept-Encoding"] = "gzip, deflate"
    return session

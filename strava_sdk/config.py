"""Central configuration for the Strava API client.

All values are constants imported by the rest of the package. Secrets and
tunables are read from environment variables (optionally via a local `.env`).
Per-client overrides go through :class:`ClientOptions`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import requests
from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Strava endpoints
# ---------------------------------------------------------------------------
STRAVA_BASE_URL = os.getenv("STRAVA_BASE_URL", "https://www.strava.com/api/v3")
STRAVA_OAUTH_URL = os.getenv("STRAVA_OAUTH_URL", "https://www.strava.com/oauth/token")
STRAVA_AUTHORIZE_URL = os.getenv(
    "STRAVA_AUTHORIZE_URL", "https://www.strava.com/oauth/authorize"
)

# Client credentials pulled from the environment. Do not hardcode secrets.
CLIENT_ID = os.getenv("STRAVA_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("STRAVA_CLIENT_SECRET", "")


# ---------------------------------------------------------------------------
# HTTP transport
# ---------------------------------------------------------------------------
# Request timeout in seconds (applies to API and token endpoint calls).
REQUEST_TIMEOUT = _env_float("STRAVA_REQUEST_TIMEOUT", 30.0)

# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 20
HTTP_POOL_MAXSIZE = 20


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------
# Master switch; when False wait/update are no-ops and retries run once.
RATE_LIMIT_ENABLED = _env_bool("STRAVA_RATE_LIMIT_ENABLED", True)
# Minimum spacing (seconds) between any two requests sharing a limiter.
RATE_LIMIT_MIN_DELAY = _env_float("STRAVA_RATE_LIMIT_MIN_DELAY", 0.1)
# Retries performed by retry_with_backoff after a 429.
RATE_LIMIT_MAX_RETRIES = _env_int("STRAVA_RATE_LIMIT_MAX_RETRIES", 3)
# Exponential backoff start and cap (seconds).
RATE_LIMIT_BACKOFF_INITIAL = 1.0
RATE_LIMIT_BACKOFF_MAX = 30.0
# Length of Strava's short quota window; the reset instant is the next
# multiple of this on the UTC clock. 0 disables reset tracking.
RATE_LIMIT_WINDOW_SECONDS = _env_int("STRAVA_RATE_LIMIT_WINDOW_SECONDS", 900)
# Response headers carrying "short,long" quota values.
RATE_LIMIT_LIMIT_HEADER = "X-RateLimit-Limit"
RATE_LIMIT_USAGE_HEADER = "X-RateLimit-Usage"


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------
# Refresh this many seconds before the access token actually expires.
TOKEN_REFRESH_BUFFER_SECONDS = _env_float("STRAVA_TOKEN_REFRESH_BUFFER_SECONDS", 5.0)
# Local port used by the OAuth helper callback server.
OAUTH_REDIRECT_PORT = _env_int("STRAVA_OAUTH_PORT", 5000)
OAUTH_DEFAULT_SCOPES = ("read", "activity:read_all")


@dataclass
class ClientOptions:
    """Per-client overrides; ``None`` fields fall back to the module constants."""

    base_url: Optional[str] = None
    timeout: Optional[float] = None
    rate_limit_enabled: Optional[bool] = None
    min_delay: Optional[float] = None
    max_retries: Optional[int] = None
    session: Optional[requests.Session] = None

    def resolved_base_url(self) -> str:
        return (self.base_url or STRAVA_BASE_URL).rstrip("/")

    def resolved_timeout(self) -> float:
        return REQUEST_TIMEOUT if self.timeout is None else self.timeout

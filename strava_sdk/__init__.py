"""Strava API client package."""

from .auth import OAuth2Config, Scopes, StaticTokenSource, TokenManager, parse_scopes
from .config import ClientOptions
from .errors import (
    NoTokenError,
    RequestCancelledError,
    StravaAPIError,
    StravaDecodeError,
    StravaError,
    StravaPermissionError,
    StravaRateLimitError,
    StravaResourceNotFoundError,
    TokenError,
    TokenExpiredError,
    TokenRefreshError,
    is_auth_error,
    is_not_found_error,
    is_rate_limit_error,
)
from .models import JSON, TEXT, Credential, Pagination, RateLimitInfo, StreamSet
from .strava_api import StravaClient, get_default_client
from .strava_client import Dispatcher, RateLimiter

__all__ = [
    "StravaClient",
    "get_default_client",
    "ClientOptions",
    "Dispatcher",
    "RateLimiter",
    "OAuth2Config",
    "TokenManager",
    "StaticTokenSource",
    "Scopes",
    "parse_scopes",
    "Credential",
    "Pagination",
    "RateLimitInfo",
    "StreamSet",
    "JSON",
    "TEXT",
    "StravaError",
    "StravaAPIError",
    "StravaRateLimitError",
    "StravaPermissionError",
    "StravaResourceNotFoundError",
    "StravaDecodeError",
    "TokenError",
    "NoTokenError",
    "TokenExpiredError",
    "TokenRefreshError",
    "RequestCancelledError",
    "is_rate_limit_error",
    "is_auth_error",
    "is_not_found_error",
]

"""Central error types used across the client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Fault:
    """One resource/field fault from a Strava error payload."""

    resource: str = ""
    field: str = ""
    code: str = ""

    def describe(self) -> str:
        target = "/".join(filter(None, (self.resource, self.field)))
        if target and self.code:
            return f"{target}:{self.code}"
        return self.code or target


class StravaError(RuntimeError):
    """Base error for everything raised by this package."""


class StravaAPIError(StravaError):
    """Non-success response from the Strava API.

    ``status_code`` always comes from the HTTP response, never from the body.
    ``body_decoded`` is False when the body was not a structured fault
    payload and ``message`` holds the raw response text instead.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        *,
        code: str = "",
        resource: str = "",
        field: str = "",
        errors: Sequence[Fault] = (),
        body_decoded: bool = True,
        raw_body: str = "",
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.code = code
        self.resource = resource
        self.field = field
        self.errors: Tuple[Fault, ...] = tuple(errors)
        self.body_decoded = body_decoded
        self.raw_body = raw_body
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.message:
            return f"strava: {self.message} (status: {self.status_code})"
        return f"strava: API error (status: {self.status_code})"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code!r}, "
            f"message={self.message!r})"
        )

    @property
    def is_rate_limit_error(self) -> bool:
        return self.status_code == 429

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_not_found_error(self) -> bool:
        return self.status_code == 404


class StravaRateLimitError(StravaAPIError):
    """Raised for HTTP 429 once the quota for the current window is spent."""


class StravaPermissionError(StravaAPIError):
    """Raised when the API reports insufficient scopes or authentication issues."""


class StravaResourceNotFoundError(StravaAPIError):
    """Raised when an activity, segment, route or other resource does not exist."""


class StravaPaymentRequiredError(StravaAPIError):
    """Raised when Strava returns HTTP 402 for subscription-only resources."""


class StravaDecodeError(StravaError):
    """Raised when a success response body is not the JSON shape expected."""


class TokenError(StravaError):
    """Base error for OAuth token state problems."""


class NoTokenError(TokenError):
    """Raised when no credential has been supplied to the token manager."""


class TokenExpiredError(TokenError):
    """Raised when the access token is expired and no refresh token is held."""


class TokenRefreshError(TokenError):
    """Raised when the refresh exchange fails; ``__cause__`` holds the reason."""


class RequestCancelledError(StravaError):
    """Raised when a cancellation signal fires at a suspension point."""


def is_rate_limit_error(exc: Optional[BaseException]) -> bool:
    return isinstance(exc, StravaAPIError) and exc.is_rate_limit_error


def is_auth_error(exc: Optional[BaseException]) -> bool:
    return isinstance(exc, StravaAPIError) and exc.is_auth_error


def is_not_found_error(exc: Optional[BaseException]) -> bool:
    return isinstance(exc, StravaAPIError) and exc.is_not_found_error


__all__ = [
    "Fault",
    "StravaError",
    "StravaAPIError",
    "StravaRateLimitError",
    "StravaPermissionError",
    "StravaResourceNotFoundError",
    "StravaPaymentRequiredError",
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

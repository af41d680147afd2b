"""OAuth 2.0 helpers for Strava: authorization URL, code/refresh exchange,
and a thread-safe token manager that refreshes ahead of expiry.

Secrets are never logged in full; tokens are masked to their last characters.
"""

from __future__ import annotations

import logging
import threading
import urllib.parse
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from .cancellation import check_cancelled, wait_or_cancel
from .config import (
    CLIENT_ID,
    CLIENT_SECRET,
    REQUEST_TIMEOUT,
    STRAVA_AUTHORIZE_URL,
    STRAVA_OAUTH_URL,
    TOKEN_REFRESH_BUFFER_SECONDS,
)
from .errors import (
    NoTokenError,
    StravaDecodeError,
    TokenExpiredError,
    TokenRefreshError,
)
from .models import Credential
from .strava_client.response_handling import classify_response, describe_error
from .strava_client.session import create_default_session

LOGGER = logging.getLogger(__name__)

SCOPE_DELIMITER = ","

TokenUpdateCallback = Callable[[Credential], None]


def mask_token(token: str | None, visible: int = 4) -> str:
    """Mask every character of ``token`` except the last ``visible``."""

    if not token:
        return ""
    keep = min(max(visible, 0), len(token))
    return "*" * (len(token) - keep) + token[len(token) - keep :]


class OAuth2Config:
    """Client credentials plus the token endpoint exchanges."""

    def __init__(
        self,
        client_id: str = CLIENT_ID,
        client_secret: str = CLIENT_SECRET,
        redirect_uri: str = "",
        scopes: Sequence[str] = (),
        *,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        token_url: str = STRAVA_OAUTH_URL,
        authorize_url: str = STRAVA_AUTHORIZE_URL,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.token_url = token_url
        self.authorize_url = authorize_url
        self._session = session or create_default_session()
        self._timeout = timeout

    def authorization_url(
        self, approval_prompt: str | None = None, state: str | None = None
    ) -> str:
        params: Dict[str, str] = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
        }
        if self.scopes:
            params["scope"] = SCOPE_DELIMITER.join(self.scopes)
        if approval_prompt:
            params["approval_prompt"] = approval_prompt
        if state:
            params["state"] = state
        return f"{self.authorize_url}?{urllib.parse.urlencode(params)}"

    def exchange_code(
        self, code: str, cancel: threading.Event | None = None
    ) -> Credential:
        """Exchange an authorization code for a credential."""

        return self._token_request(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "grant_type": "authorization_code",
            },
            cancel,
        )

    def refresh(
        self, refresh_token: str, cancel: threading.Event | None = None
    ) -> Credential:
        """Exchange a refresh token for a new credential."""

        return self._token_request(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
            cancel,
        )

    def _token_request(
        self, payload: Dict[str, str], cancel: threading.Event | None
    ) -> Credential:
        grant_type = payload["grant_type"]
        LOGGER.debug("Token endpoint: %s grant_type=%s", self.token_url, grant_type)
        check_cancelled(cancel)
        resp = self._session.post(self.token_url, data=payload, timeout=self._timeout)
        status = resp.status_code
        LOGGER.debug("Token endpoint status=%s", status)
        if not 200 <= status < 300:
            error = classify_response(resp)
            LOGGER.error(
                "Token %s failed status=%s detail=%s",
                grant_type,
                status,
                describe_error(error),
            )
            raise error
        try:
            data = resp.json()
        except ValueError as exc:
            LOGGER.error("Invalid JSON in token response: %s", exc)
            raise StravaDecodeError("failed to decode token response") from exc
        if not isinstance(data, dict):
            LOGGER.error("Unexpected token response shape: %s", type(data).__name__)
            raise StravaDecodeError("unexpected token response shape")
        if not data.get("access_token"):
            LOGGER.error("No access_token in token response")
            raise StravaDecodeError("no access_token in token response")
        credential = Credential.from_token_response(data)
        LOGGER.info(
            "Token %s succeeded access_token=%s expires_at=%s",
            grant_type,
            mask_token(credential.access_token),
            int(credential.expires_at),
        )
        return credential


class _RefreshCall:
    """Outcome of one in-flight refresh shared by every waiting caller."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.credential: Optional[Credential] = None
        self.error: Optional[BaseException] = None


class TokenManager:
    """Own a credential and refresh it before it expires.

    Refresh is single-flight: one caller performs the exchange and concurrent
    callers wait for its outcome. The update callback runs synchronously
    inside the refresh critical section, so it must return quickly.
    """

    def __init__(
        self,
        config: OAuth2Config,
        credential: Credential | None = None,
        refresh_buffer: float = TOKEN_REFRESH_BUFFER_SECONDS,
    ) -> None:
        self._config = config
        self._lock = threading.RLock()
        self._credential = credential
        self._refresh_token = credential.refresh_token if credential else None
        self._refresh_buffer = refresh_buffer
        self._on_update: Optional[TokenUpdateCallback] = None
        self._inflight: Optional[_RefreshCall] = None

    @property
    def credential(self) -> Optional[Credential]:
        with self._lock:
            return self._credential

    def set_token_update_callback(self, callback: TokenUpdateCallback | None) -> None:
        with self._lock:
            self._on_update = callback

    def update_token(self, credential: Credential) -> None:
        """Replace the held credential, e.g. after an external code exchange."""

        with self._lock:
            self._credential = credential
            if credential.refresh_token:
                self._refresh_token = credential.refresh_token

    def _needs_refresh(self, credential: Credential) -> bool:
        return credential.time_until_expiration() <= self._refresh_buffer

    def get_access_token(self, cancel: threading.Event | None = None) -> str:
        check_cancelled(cancel)
        with self._lock:
            credential = self._credential
            if credential is None:
                raise NoTokenError("no token available")
            if not self._needs_refresh(credential):
                return credential.access_token
            if not self._refresh_token:
                raise TokenExpiredError("token expired and no refresh token available")
            call = self._inflight
            if call is None:
                call = self._inflight = _RefreshCall()
                refresh_token = self._refresh_token
                leader = True
            else:
                leader = False

        if not leader:
            LOGGER.debug("Token refresh already in flight; waiting for its outcome")
            wait_or_cancel(call.done, cancel)
            if call.credential is None:
                raise TokenRefreshError(
                    f"failed to refresh token: {call.error}"
                ) from call.error
            return call.credential.access_token
        return self._refresh(call, refresh_token)

    def _refresh(self, call: _RefreshCall, refresh_token: str) -> str:
        LOGGER.info("Refreshing Strava token refresh_token=%s", mask_token(refresh_token))
        try:
            new_credential = self._config.refresh(refresh_token)
        except Exception as exc:
            call.error = exc
            LOGGER.error("Token refresh failed: %s", exc)
            raise TokenRefreshError(f"failed to refresh token: {exc}") from exc
        else:
            with self._lock:
                self._credential = new_credential
                self._refresh_token = new_credential.refresh_token or refresh_token
                call.credential = new_credential
                self._notify(new_credential)
            return new_credential.access_token
        finally:
            with self._lock:
                if self._inflight is call:
                    self._inflight = None
                call.done.set()

    def _notify(self, credential: Credential) -> None:
        callback = self._on_update
        if callback is None:
            return
        try:
            callback(credential)
        except Exception as exc:
            LOGGER.warning("Token update callback failed: %s", exc, exc_info=True)


class StaticTokenSource:
    """Token source for a fixed bearer token with no refresh capability."""

    def __init__(self, access_token: str = "") -> None:
        self._lock = threading.Lock()
        self._access_token = access_token

    def set_access_token(self, access_token: str) -> None:
        with self._lock:
            self._access_token = access_token

    def get_access_token(self, cancel: threading.Event | None = None) -> str:
        check_cancelled(cancel)
        with self._lock:
            if not self._access_token:
                raise NoTokenError("no token available")
            return self._access_token


@dataclass
class Scopes:
    """Strava OAuth scopes as flags."""

    read: bool = False
    read_all: bool = False
    profile_read_all: bool = False
    profile_write: bool = False
    activity_read: bool = False
    activity_read_all: bool = False
    activity_write: bool = False

    def to_list(self) -> List[str]:
        return [_SCOPE_NAMES[f.name] for f in fields(self) if getattr(self, f.name)]


_SCOPE_NAMES: Dict[str, str] = {
    "read": "read",
    "read_all": "read_all",
    "profile_read_all": "profile:read_all",
    "profile_write": "profile:write",
    "activity_read": "activity:read",
    "activity_read_all": "activity:read_all",
    "activity_write": "activity:write",
}
_SCOPE_FIELDS = {name: attr for attr, name in _SCOPE_NAMES.items()}


def parse_scopes(scope_string: str) -> Scopes:
    """Parse a comma separated scope string; unknown names are ignored."""

    flags: Dict[str, Any] = {}
    for scope in scope_string.split(SCOPE_DELIMITER):
        attr = _SCOPE_FIELDS.get(scope.strip())
        if attr:
            flags[attr] = True
    return Scopes(**flags)


__all__ = [
    "OAuth2Config",
    "TokenManager",
    "StaticTokenSource",
    "Scopes",
    "parse_scopes",
    "SCOPE_DELIMITER",
    "mask_token",
]

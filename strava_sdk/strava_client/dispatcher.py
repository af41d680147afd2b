"""Request dispatch: build, throttle, send, then classify or decode."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import requests

from ..cancellation import check_cancelled
from ..config import REQUEST_TIMEOUT, STRAVA_BASE_URL
from ..errors import StravaDecodeError
from ..models import JSON, TEXT, RequestSpec
from .rate_limiter import RateLimiter, parse_rate_limit_headers
from .response_handling import classify_response, describe_error
from .session import create_default_session

LOGGER = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

_SCALARS = (str, int, float, bool)

__all__ = ["Dispatcher", "TokenSource", "encode_body", "encode_params"]


class TokenSource(Protocol):
    def get_access_token(self, cancel: Optional[threading.Event] = None) -> str: ...


def encode_params(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop ``None`` values and comma-join list values."""

    if not params:
        return None
    encoded: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            encoded[key] = ",".join(str(item) for item in value)
        else:
            encoded[key] = value
    return encoded or None


def _is_flat_mapping(body: Any) -> bool:
    return isinstance(body, Mapping) and all(
        isinstance(value, _SCALARS) for value in body.values()
    )


def encode_body(body: Any) -> Tuple[Any, Optional[str]]:
    """Return ``(data, content_type)`` for a request body.

    Flat key/value maps are form encoded, bytes and file-like objects pass
    through unchanged, anything else is JSON encoded.
    """

    if body is None:
        return None, None
    if _is_flat_mapping(body):
        form = {
            key: ("true" if value else "false") if isinstance(value, bool) else value
            for key, value in body.items()
        }
        return form, FORM_CONTENT_TYPE
    if isinstance(body, (bytes, bytearray)) or hasattr(body, "read"):
        return body, JSON_CONTENT_TYPE
    return json.dumps(body), JSON_CONTENT_TYPE


class Dispatcher:
    """Turns one logical API call into an authenticated, paced HTTP exchange.

    The bearer token is read after ``RateLimiter.wait`` returns, so a long
    quota wait never sends a token that expired while blocked.

    There is no retry here; callers opt in with
    ``RateLimiter.retry_with_backoff``.
    """

    def __init__(
        self,
        token_source: TokenSource,
        *,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        base_url: str = STRAVA_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._token_source = token_source
        self._session = session or create_default_session()
        self._limiter = limiter or RateLimiter()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self._base_url + path

    def perform(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        result: Any = JSON,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        """Send one request and return the decoded result.

        ``result`` selects the decoding: ``None`` discards the body, ``JSON``
        returns parsed JSON, ``TEXT`` returns the raw text, a type such as
        ``dict`` or ``list`` checks the parsed JSON shape, and any other
        callable is applied to the parsed JSON.

        Raises ``StravaAPIError`` for non-2xx responses, ``StravaDecodeError``
        for malformed success bodies, and lets transport errors through.
        """

        return self.execute(RequestSpec(method, path, params, body, result), cancel)

    def execute(self, spec: RequestSpec, cancel: Optional[threading.Event] = None) -> Any:
        method = spec.method.upper()
        url = self.url_for(spec.path)
        data, content_type = encode_body(spec.body)

        self._limiter.wait(cancel)
        check_cancelled(cancel)
        # A quota wait can outlast the token, so fetch it once the slot is ours.
        headers = {
            "Authorization": f"Bearer {self._token_source.get_access_token(cancel)}"
        }
        if content_type:
            headers["Content-Type"] = content_type
        LOGGER.debug("%s %s", method, url)
        response = self._session.request(
            method,
            url,
            params=encode_params(spec.params),
            data=data,
            headers=headers,
            timeout=self._timeout,
        )
        self._limiter.update(parse_rate_limit_headers(response.headers))

        if not 200 <= response.status_code < 300:
            error = classify_response(response)
            LOGGER.warning(
                "%s %s failed status=%s: %s",
                method,
                spec.path,
                response.status_code,
                describe_error(error),
            )
            raise error
        return self._decode(response, spec)

    def _decode(self, response: requests.Response, spec: RequestSpec) -> Any:
        result = spec.result
        if result is None:
            return None
        if result is TEXT:
            return response.text
        try:
            payload = response.json()
        except ValueError as exc:
            LOGGER.error("Non-JSON payload from %s %s", spec.method, spec.path)
            raise StravaDecodeError(
                f"{spec.method} {spec.path} returned a non-JSON payload"
            ) from exc
        if result is JSON:
            return payload
        if isinstance(result, type):
            if not isinstance(payload, result):
                raise StravaDecodeError(
                    f"{spec.method} {spec.path} returned {type(payload).__name__}, "
                    f"expected {result.__name__}"
                )
            return payload
        try:
            return result(payload)
        except (ValueError, TypeError, KeyError) as exc:
            raise StravaDecodeError(
                f"{spec.method} {spec.path} returned an unexpected payload: {exc}"
            ) from exc

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        return self.perform("GET", path, params=params, **kwargs)

    def post(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return self.perform("POST", path, body=body, **kwargs)

    def put(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return self.perform("PUT", path, body=body, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        kwargs.setdefault("result", None)
        return self.perform("DELETE", path, **kwargs)

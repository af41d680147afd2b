"""Turn non-success Strava responses into typed API errors."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Type, Union

import requests

from ..errors import (
    Fault,
    StravaAPIError,
    StravaPaymentRequiredError,
    StravaPermissionError,
    StravaRateLimitError,
    StravaResourceNotFoundError,
)

LOGGER = logging.getLogger(__name__)

__all__ = [
    "classify_error",
    "classify_response",
    "describe_error",
    "error_class_for_status",
]

_ERROR_CLASSES: Dict[int, Type[StravaAPIError]] = {
    401: StravaPermissionError,
    402: StravaPaymentRequiredError,
    403: StravaPermissionError,
    404: StravaResourceNotFoundError,
    429: StravaRateLimitError,
}


def error_class_for_status(status_code: int) -> Type[StravaAPIError]:
    return _ERROR_CLASSES.get(status_code, StravaAPIError)


def classify_error(status_code: int, body: Union[bytes, str, None]) -> StravaAPIError:
    """Build the API error for a non-2xx response.

    A structured fault payload populates message, code and faults. Anything
    else (invalid JSON, a non-object, undecodable bytes) falls back to the raw
    text as message with ``body_decoded=False``.
    """

    text = _body_text(body)
    error_cls = error_class_for_status(status_code)
    payload = _decode_fault_payload(text)
    if payload is None:
        return error_cls(
            status_code,
            text.strip(),
            body_decoded=False,
            raw_body=text,
        )
    return error_cls(
        status_code,
        _as_str(payload.get("message")),
        code=_as_str(payload.get("code")),
        resource=_as_str(payload.get("resource")),
        field=_as_str(payload.get("field")),
        errors=_collect_faults(payload.get("errors")),
        raw_body=text,
    )


def classify_response(response: requests.Response) -> StravaAPIError:
    error = classify_error(response.status_code, response.content)
    LOGGER.debug(
        "%s %s failed: %s",
        getattr(getattr(response, "request", None), "method", "?"),
        getattr(response, "url", "?"),
        describe_error(error),
    )
    return error


def describe_error(error: StravaAPIError) -> str:
    """Return compact ``message | resource/field:code`` text for logs."""

    parts: List[str] = []
    if error.message:
        parts.append(error.message)
    for fault in error.errors:
        described = fault.describe()
        if described:
            parts.append(described)
    if not parts:
        parts.append(f"status {error.status_code}")
    return " | ".join(parts)


def _body_text(body: Union[bytes, str, None]) -> str:
    if body is None:
        return ""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body).decode("utf-8", errors="replace")
    return str(body)


def _decode_fault_payload(text: str) -> Optional[Dict[str, Any]]:
    if not text.strip():
        return None
    try:
        data = json.loads(text)
    except ValueError as exc:
        LOGGER.debug("Error body is not JSON: %s", exc)
        return None
    if not isinstance(data, dict):
        return None
    return data


def _collect_faults(raw: Any) -> List[Fault]:
    faults: List[Fault] = []
    if not isinstance(raw, list):
        return faults
    for err in raw:
        if not isinstance(err, dict):
            continue
        faults.append(
            Fault(
                resource=_as_str(err.get("resource")),
                field=_as_str(err.get("field")),
                code=_as_str(err.get("code")),
            )
        )
    return faults


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)

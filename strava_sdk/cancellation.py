"""Cancellable suspension helpers.

A cancellation signal is a plain :class:`threading.Event`; setting it makes
any pending ``sleep_or_cancel`` / ``wait_or_cancel`` raise promptly.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import RequestCancelledError

__all__ = ["check_cancelled", "sleep_or_cancel", "wait_or_cancel"]

# Poll interval used when waiting on an event and a cancel signal together.
_POLL_SECONDS = 0.05


def check_cancelled(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise RequestCancelledError("operation cancelled")


def sleep_or_cancel(seconds: float, cancel: Optional[threading.Event] = None) -> None:
    """Sleep ``seconds`` unless ``cancel`` fires first."""

    check_cancelled(cancel)
    if seconds <= 0:
        return
    if cancel is None:
        time.sleep(seconds)
        return
    if cancel.wait(seconds):
        raise RequestCancelledError("operation cancelled")


def wait_or_cancel(
    event: threading.Event,
    cancel: Optional[threading.Event] = None,
    timeout: Optional[float] = None,
) -> bool:
    """Wait for ``event``; return False on timeout, raise on cancellation."""

    if cancel is None:
        return event.wait(timeout)
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        check_cancelled(cancel)
        if deadline is None:
            step = _POLL_SECONDS
        else:
            step = min(_POLL_SECONDS, deadline - time.monotonic())
            if step <= 0:
                return event.is_set()
        if event.wait(step):
            return True

import threading
import time

import pytest

from strava_sdk.auth import TokenManager
from strava_sdk.errors import (
    NoTokenError,
    RequestCancelledError,
    StravaAPIError,
    TokenExpiredError,
    TokenRefreshError,
)
from strava_sdk.models import Credential


class FakeConfig:
    """Stands in for OAuth2Config; counts refresh exchanges."""

    def __init__(self, outcome=None, delay=0.0):
        self.outcome = outcome
        self.delay = delay
        self.calls = []
        self.lock = threading.Lock()

    def refresh(self, refresh_token, cancel=None):
        with self.lock:
            self.calls.append(refresh_token)
            count = len(self.calls)
        if self.delay:
            time.sleep(self.delay)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        if self.outcome is not None:
            return self.outcome
        return Credential(
            access_token=f"new-access-{count}",
            refresh_token=f"new-refresh-{count}",
            expires_at=time.time() + 3600,
        )


def _expiring(seconds, refresh_token="old-refresh"):
    return Credential(
        access_token="old-access",
        refresh_token=refresh_token,
        expires_at=time.time() + seconds,
    )


def test_no_credential_raises_no_token():
    manager = TokenManager(FakeConfig())
    with pytest.raises(NoTokenError):
        manager.get_access_token()


def test_valid_token_returned_without_refresh():
    config = FakeConfig()
    manager = TokenManager(config, _expiring(3600))

    assert manager.get_access_token() == "old-access"
    assert config.calls == []


def test_expired_without_refresh_token_makes_no_call():
    config = FakeConfig()
    manager = TokenManager(config, _expiring(-10, refresh_token=None))

    with pytest.raises(TokenExpiredError):
        manager.get_access_token()
    assert config.calls == []


def test_token_within_buffer_is_refreshed():
    config = FakeConfig()
    manager = TokenManager(config, _expiring(3), refresh_buffer=5)

    assert manager.get_access_token() == "new-access-1"
    assert config.calls == ["old-refresh"]
    assert manager.credential.refresh_token == "new-refresh-1"


def test_refresh_keeps_previous_refresh_token_when_omitted():
    config = FakeConfig(
        outcome=Credential(access_token="fresh", expires_at=time.time() + 3600)
    )
    manager = TokenManager(config, _expiring(-1))

    assert manager.get_access_token() == "fresh"
    manager.update_token(_expiring(-1, refresh_token=None))
    config.outcome = None
    manager.get_access_token()
    assert config.calls == ["old-refresh", "old-refresh"]


def test_concurrent_callers_share_one_refresh():
    config = FakeConfig(delay=0.2)
    manager = TokenManager(config, _expiring(-1))
    notified = []
    manager.set_token_update_callback(notified.append)
    results = []
    errors = []
    start = threading.Barrier(8)

    def worker():
        start.wait()
        try:
            results.append(manager.get_access_token())
        except Exception as exc:  # pragma: no cover - surfaced by assert below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert len(config.calls) == 1
    assert results == ["new-access-1"] * 8
    assert len(notified) == 1
    assert notified[0].access_token == "new-access-1"


def test_refresh_failure_keeps_old_credential():
    cause = StravaAPIError(400, "Bad Request")
    config = FakeConfig(outcome=cause)
    old = _expiring(-1)
    manager = TokenManager(config, old)
    notified = []
    manager.set_token_update_callback(notified.append)

    with pytest.raises(TokenRefreshError) as excinfo:
        manager.get_access_token()

    assert excinfo.value.__cause__ is cause
    assert manager.credential is old
    assert notified == []


def test_concurrent_failure_reaches_every_waiter():
    config = FakeConfig(outcome=StravaAPIError(500, "boom"), delay=0.2)
    manager = TokenManager(config, _expiring(-1))
    failures = []
    start = threading.Barrier(4)

    def worker():
        start.wait()
        try:
            manager.get_access_token()
        except TokenRefreshError as exc:
            failures.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert len(config.calls) == 1
    assert len(failures) == 4


def test_failed_refresh_can_be_retried():
    config = FakeConfig(outcome=StravaAPIError(503))
    manager = TokenManager(config, _expiring(-1))
    with pytest.raises(TokenRefreshError):
        manager.get_access_token()

    config.outcome = None
    assert manager.get_access_token() == "new-access-2"


def test_callback_errors_do_not_undo_the_swap():
    manager = TokenManager(FakeConfig(), _expiring(-1))

    def broken(_credential):
        raise RuntimeError("observer failed")

    manager.set_token_update_callback(broken)
    assert manager.get_access_token() == "new-access-1"
    assert manager.credential.access_token == "new-access-1"


def test_update_token_replaces_credential():
    manager = TokenManager(FakeConfig())
    manager.update_token(_expiring(3600))
    assert manager.get_access_token() == "old-access"


def test_cancelled_before_start():
    config = FakeConfig()
    manager = TokenManager(config, _expiring(-1))
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(RequestCancelledError):
        manager.get_access_token(cancel)
    assert config.calls == []


def test_waiting_follower_can_be_cancelled():
    config = FakeConfig(delay=0.5)
    manager = TokenManager(config, _expiring(-1))
    leader = threading.Thread(target=manager.get_access_token)
    leader.start()
    time.sleep(0.05)

    cancel = threading.Event()
    threading.Timer(0.05, cancel.set).start()
    started = time.monotonic()
    with pytest.raises(RequestCancelledError):
        manager.get_access_token(cancel)
    assert time.monotonic() - started < 0.4

    leader.join(timeout=5)
    assert len(config.calls) == 1
    assert manager.credential.access_token == "new-access-1"

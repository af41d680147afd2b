"""Global pytest fixtures & helpers.

Adds project root to path and provides fake HTTP responses/sessions so no
test touches the network.
"""
from __future__ import annotations

import json
import os
import sys
import threading

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from strava_sdk.strava_client import Dispatcher, RateLimiter


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, headers=None, text=None):
        self.status_code = status_code
        self._data = data
        self.headers = headers or {}
        self._text = text
        self.url = "https://example.test/fake"
        self.json_calls = 0

    @property
    def text(self):
        if self._text is not None:
            return self._text
        if self._data is None:
            return ""
        return json.dumps(self._data)

    @property
    def content(self):
        return self.text.encode()

    def json(self):
        self.json_calls += 1
        return json.loads(self.text)


class FakeSession:
    """Records requests and replays queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.lock = threading.Lock()

    def _next(self):
        with self.lock:
            if not self.responses:
                raise AssertionError("unexpected HTTP call")
            resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "data": data,
                "headers": headers,
                "timeout": timeout,
            }
        )
        return self._next()

    def post(self, url, data=None, timeout=None):
        self.calls.append({"method": "POST", "url": url, "data": data, "timeout": timeout})
        return self._next()


class StaticToken:
    def __init__(self, token="tok"):
        self.token = token
        self.calls = 0

    def get_access_token(self, cancel=None):
        self.calls += 1
        return self.token


@pytest.fixture
def fast_limiter():
    return RateLimiter(min_delay=0.0)


@pytest.fixture
def make_dispatcher(fast_limiter):
    def _make(*responses, token="tok", limiter=None):
        session = FakeSession(*responses)
        dispatcher = Dispatcher(
            StaticToken(token),
            session=session,
            limiter=limiter or fast_limiter,
            base_url="https://api.test/v3",
            timeout=5,
        )
        return dispatcher, session

    return _make

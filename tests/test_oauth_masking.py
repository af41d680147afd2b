"""Unit tests for Strava OAuth helper utilities."""

import urllib.parse

import pytest

from strava_sdk import oauth
from strava_sdk.auth import mask_token
from strava_sdk.models import Credential


def test_mask_token_handles_short_values() -> None:
    assert mask_token("abcd", visible=4) == "abcd"
    assert mask_token("abcd", visible=2) == "**cd"
    assert mask_token("abcd", visible=0) == "****"


def test_mask_token_handles_empty_and_smaller_values() -> None:
    assert mask_token("", visible=4) == ""
    assert mask_token(None) == ""
    assert mask_token("a", visible=4) == "a"
    assert mask_token("ab", visible=5) == "ab"


def test_mask_token_negative_visible_defaults_to_all_masked() -> None:
    assert mask_token("abcdef", visible=-2) == "******"


@pytest.fixture
def flow():
    result = oauth.AuthorizationResult()
    return result, oauth.create_app(result).test_client()


def test_callback_rejects_mismatched_state(flow) -> None:
    result, client = flow

    resp = client.get("/callback?state=wrong&code=abc")

    assert resp.status_code == 400
    assert result.code is None
    assert not result.received.is_set()


def test_callback_rejects_missing_state(flow) -> None:
    result, client = flow
    assert client.get("/callback?code=abc").status_code == 400
    assert result.code is None


def test_callback_records_code_and_scope(flow) -> None:
    result, client = flow
    query = urllib.parse.urlencode(
        {"state": result.state, "code": "abc", "scope": "read,activity:read_all"}
    )

    resp = client.get(f"/callback?{query}")

    assert resp.status_code == 200
    assert result.code == "abc"
    assert result.scope == "read,activity:read_all"
    assert result.received.is_set()


def test_callback_denied_sets_event_without_code(flow) -> None:
    result, client = flow
    query = urllib.parse.urlencode({"state": result.state, "error": "access_denied"})

    resp = client.get(f"/callback?{query}")

    assert resp.status_code == 200
    assert result.code is None
    assert result.error == "access_denied"
    assert result.received.is_set()


def test_build_oauth_config_uses_local_redirect() -> None:
    config = oauth.build_oauth_config(port=8123)

    query = urllib.parse.parse_qs(urllib.parse.urlparse(config.authorization_url()).query)

    assert query["redirect_uri"] == ["http://localhost:8123/callback"]
    assert query["scope"] == [",".join(oauth.OAUTH_DEFAULT_SCOPES)]


class NoServer:
    def __init__(self, result, port):
        self.result = result

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None


class FakeConfig:
    def __init__(self):
        self.codes = []

    def authorization_url(self, approval_prompt=None, state=None):
        return f"https://consent.test/?state={state}&approval_prompt={approval_prompt}"

    def exchange_code(self, code, cancel=None):
        self.codes.append(code)
        return Credential("access-secret-1234", "refresh-secret-5678", expires_at=0)


def test_authorize_exchanges_code_from_callback(monkeypatch) -> None:
    monkeypatch.setattr(oauth, "CallbackServer", NoServer)
    result = oauth.AuthorizationResult()
    opened = []

    def browser(url):
        opened.append(url)
        result.code = "abc"
        result.received.set()

    config = FakeConfig()
    credential = oauth.authorize(
        config, port=1, open_browser=browser, result=result, approval_prompt="auto"
    )

    assert credential.access_token == "access-secret-1234"
    assert config.codes == ["abc"]
    assert opened == [f"https://consent.test/?state={result.state}&approval_prompt=auto"]


def test_authorize_returns_none_on_timeout_or_denial(monkeypatch) -> None:
    monkeypatch.setattr(oauth, "CallbackServer", NoServer)
    config = FakeConfig()

    assert oauth.authorize(config, port=1, wait_timeout=0.01, open_browser=lambda url: None) is None

    denied = oauth.AuthorizationResult(error="access_denied")
    denied.received.set()
    assert oauth.authorize(config, port=1, open_browser=lambda url: None, result=denied) is None
    assert config.codes == []


def test_log_credential_masks_tokens(caplog) -> None:
    credential = Credential("access-secret-1234", "refresh-secret-5678", expires_at=0)

    with caplog.at_level("INFO", logger="strava_sdk.oauth"):
        oauth.log_credential(credential, print_tokens=False)

    assert "access-secret-1234" not in caplog.text
    assert "1234" in caplog.text
    assert "5678" in caplog.text

"""Local OAuth helper.

Runs a one-shot callback server on ``localhost``, sends the athlete's
browser to the Strava consent page and exchanges the returned code for a
:class:`~strava_sdk.models.Credential`. Usable as ``python -m strava_sdk.oauth``
or through ``python -m strava_sdk authorize``.
"""

from __future__ import annotations

import argparse
import logging
import secrets
import threading
import webbrowser
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests
from flask import Flask, abort, request
from flask.typing import ResponseReturnValue
from werkzeug.serving import BaseWSGIServer, make_server

from .auth import OAuth2Config, mask_token
from .config import CLIENT_ID, CLIENT_SECRET, OAUTH_DEFAULT_SCOPES, OAUTH_REDIRECT_PORT
from .errors import StravaError
from .models import Credential

LOGGER = logging.getLogger(__name__)

CALLBACK_PATH = "/callback"
DEFAULT_WAIT_SECONDS = 60


@dataclass
class AuthorizationResult:
    """What the browser redirect delivered to the callback."""

    state: str = field(default_factory=lambda: secrets.token_urlsafe(16))
    code: Optional[str] = None
    scope: Optional[str] = None
    error: Optional[str] = None
    received: threading.Event = field(default_factory=threading.Event)


def create_app(result: AuthorizationResult) -> Flask:
    """Flask app whose only route records the redirect into ``result``."""

    app = Flask(__name__)

    @app.route(CALLBACK_PATH)
    def callback() -> ResponseReturnValue:
        if request.args.get("state") != result.state:
            LOGGER.error("OAuth callback with unexpected state; rejecting")
            abort(400, description="Invalid state")
        result.error = request.args.get("error")
        if result.error:
            LOGGER.error("Athlete declined authorisation: %s", result.error)
            result.received.set()
            return "Strava authorisation was declined. This tab can be closed."
        result.code = request.args.get("code")
        result.scope = request.args.get("scope")
        LOGGER.info("Authorisation code received (granted scope=%s)", result.scope)
        result.received.set()
        return "Strava authorisation complete. This tab can be closed."

    return app


class CallbackServer:
    """Serve :func:`create_app` on a daemon thread for the life of a ``with`` block."""

    def __init__(
        self,
        result: AuthorizationResult,
        port: int = OAUTH_REDIRECT_PORT,
        host: str = "localhost",
    ) -> None:
        self.result = result
        self.host = host
        self.port = port
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> "CallbackServer":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        # Binding happens here, so a busy port raises OSError to the caller.
        self._server = make_server(self.host, self.port, create_app(self.result))
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="oauth-callback", daemon=True
        )
        self._thread.start()
        LOGGER.info(
            "OAuth callback listening on http://%s:%s%s", self.host, self.port, CALLBACK_PATH
        )

    def stop(self) -> None:
        if self._server is not None:
            LOGGER.info("Shutting down local OAuth server.")
            self._server.shutdown()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None


def build_oauth_config(port: int = OAUTH_REDIRECT_PORT) -> OAuth2Config:
    return OAuth2Config(
        CLIENT_ID,
        CLIENT_SECRET,
        redirect_uri=f"http://localhost:{port}{CALLBACK_PATH}",
        scopes=OAUTH_DEFAULT_SCOPES,
    )


def authorize(
    config: OAuth2Config,
    *,
    port: int = OAUTH_REDIRECT_PORT,
    wait_timeout: float = DEFAULT_WAIT_SECONDS,
    approval_prompt: str = "force",
    open_browser: Callable[[str], object] = webbrowser.open,
    result: Optional[AuthorizationResult] = None,
) -> Optional[Credential]:
    """Drive the browser consent round trip and exchange the code.

    Returns ``None`` when the athlete declines or the callback never arrives.
    Exchange failures raise the classified :class:`StravaAPIError`.
    """

    result = result or AuthorizationResult()
    with CallbackServer(result, port):
        url = config.authorization_url(approval_prompt=approval_prompt, state=result.state)
        LOGGER.info("Opening browser for authorisation: %s", url)
        open_browser(url)
        if not result.received.wait(timeout=wait_timeout):
            LOGGER.error("No OAuth callback within %ss", wait_timeout)
            return None
    if not result.code:
        LOGGER.error("Callback carried no authorisation code")
        return None
    LOGGER.info("Exchanging authorisation code for tokens...")
    return config.exchange_code(result.code)


def log_credential(credential: Credential, print_tokens: bool) -> None:
    if print_tokens:
        LOGGER.warning("Printing raw Strava tokens to stdout. Handle with care!")
        print(f"access_token={credential.access_token}")
        print(f"refresh_token={credential.refresh_token or ''}")
    else:
        LOGGER.info(
            "Token exchange succeeded: access_token=%s refresh_token=%s",
            mask_token(credential.access_token),
            mask_token(credential.refresh_token),
        )
    LOGGER.info("Access token expires at %s", credential.expiration_time().isoformat())
    athlete = credential.athlete or {}
    if athlete:
        LOGGER.info(
            "Authorised athlete %s %s (id=%s)",
            athlete.get("firstname", ""),
            athlete.get("lastname", ""),
            athlete.get("id"),
        )


def start_oauth_flow(
    *,
    print_tokens: bool = False,
    wait_timeout: float = DEFAULT_WAIT_SECONDS,
    port: int = OAUTH_REDIRECT_PORT,
    approval_prompt: str = "force",
) -> Optional[Credential]:
    """Run the flow with environment credentials; ``None`` on any failure."""

    config = build_oauth_config(port)
    try:
        credential = authorize(
            config, port=port, wait_timeout=wait_timeout, approval_prompt=approval_prompt
        )
    except (StravaError, requests.RequestException) as exc:
        LOGGER.error("Failed to exchange code for tokens: %s", exc)
        return None
    except OSError as exc:
        LOGGER.error("Could not start OAuth callback server on port %s: %s", port, exc)
        return None
    if credential is not None:
        log_credential(credential, print_tokens)
    return credential


def build_parser(parser: Optional[argparse.ArgumentParser] = None) -> argparse.ArgumentParser:
    parser = parser or argparse.ArgumentParser(description="Authorise this app with Strava")
    parser.add_argument(
        "--print-tokens",
        action="store_true",
        help="Print the raw tokens instead of logging masked values",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_WAIT_SECONDS,
        help="Seconds to wait for the browser callback",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=OAUTH_REDIRECT_PORT,
        help="Local port for the OAuth callback server",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    args = build_parser().parse_args(argv)
    credential = start_oauth_flow(
        print_tokens=args.print_tokens, wait_timeout=args.timeout, port=args.port
    )
    return 0 if credential else 1


if __name__ == "__main__":
    raise SystemExit(main())

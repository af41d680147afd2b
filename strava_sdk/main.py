"""Command line entry point: ``python -m strava_sdk <command>``."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

import requests

from . import oauth
from .auth import OAuth2Config, TokenManager
from .errors import StravaError
from .models import Credential, Pagination
from .strava_api import StravaClient

LOGGER = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def build_client() -> StravaClient:
    """Client from the environment: refreshing when a refresh token is set."""

    refresh_token = os.getenv("STRAVA_REFRESH_TOKEN", "")
    access_token = os.getenv("STRAVA_ACCESS_TOKEN", "")
    if refresh_token:
        # expires_at=0 forces a refresh on first use.
        credential = Credential(
            access_token=access_token, refresh_token=refresh_token, expires_at=0
        )
        return StravaClient(token_manager=TokenManager(OAuth2Config(), credential))
    return StravaClient(access_token)


def _print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def _cmd_athlete(client: StravaClient, args: argparse.Namespace) -> None:
    _print_json(client.athletes.get_current())


def _cmd_activities(client: StravaClient, args: argparse.Namespace) -> None:
    pagination = Pagination(page=args.page, per_page=args.per_page)
    activities = client.retry_with_backoff(
        lambda: client.activities.list(pagination=pagination)
    )
    _print_json(activities)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="strava_sdk", description="Strava API client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("athlete", help="Show the authenticated athlete")
    activities = sub.add_parser("activities", help="List recent activities")
    activities.add_argument("--page", type=int, default=1)
    activities.add_argument("--per-page", type=int, default=30)
    oauth.build_parser(sub.add_parser("authorize", help="Run the browser OAuth flow"))
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.verbose)
    if args.command == "authorize":
        credential = oauth.start_oauth_flow(
            print_tokens=args.print_tokens, wait_timeout=args.timeout, port=args.port
        )
        return 0 if credential else 1
    client = build_client()
    handlers = {"athlete": _cmd_athlete, "activities": _cmd_activities}
    try:
        handlers[args.command](client, args)
    except (StravaError, requests.RequestException) as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1
    return 0

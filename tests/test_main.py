import json

from strava_sdk import main as cli
from strava_sdk.errors import StravaAPIError


class FakeAthletes:
    def __init__(self, outcome):
        self.outcome = outcome

    def get_current(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeClient:
    def __init__(self, outcome):
        self.athletes = FakeAthletes(outcome)


def test_build_client_prefers_refresh_token(monkeypatch):
    monkeypatch.setenv("STRAVA_REFRESH_TOKEN", "rt")
    monkeypatch.setenv("STRAVA_ACCESS_TOKEN", "")

    client = cli.build_client()

    assert client.token_manager is not None
    assert client.token_manager.credential.refresh_token == "rt"


def test_build_client_static_token(monkeypatch):
    monkeypatch.delenv("STRAVA_REFRESH_TOKEN", raising=False)
    monkeypatch.setenv("STRAVA_ACCESS_TOKEN", "at")

    client = cli.build_client()

    assert client.token_manager is None


def test_athlete_command_prints_json(monkeypatch, capsys):
    monkeypatch.setattr(cli, "build_client", lambda: FakeClient({"id": 42}))

    assert cli.main(["athlete"]) == 0
    assert json.loads(capsys.readouterr().out) == {"id": 42}


def test_api_failure_exits_non_zero(monkeypatch):
    monkeypatch.setattr(
        cli, "build_client", lambda: FakeClient(StravaAPIError(401, "Authorization Error"))
    )

    assert cli.main(["athlete"]) == 1

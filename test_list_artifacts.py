"""
Pytest tests for list_artifacts.py (token refresh on 401 and the CLI entry point).
"""

import json
import threading

import pytest

import list_artifacts
from conftest import FakeResponse
from github_app import GitHubApp, GitHubAuthError, InstallationToken

RUNS_URL = "repos/octo-org/app/actions/workflows/ci.yml/runs"
RUN = {"id": 30433642, "head_branch": "main", "workflow_id": 161335, "check_suite_url": "https://api.github.com/x"}


class FakeAuth:
    """Hands out installation tokens in order; `forced` always mints the next one."""

    def __init__(self, *tokens):
        self._tokens = [InstallationToken(t) for t in tokens]
        self._current = None
        self.forced_calls = 0

    def token(self, installation_id, *, forced=False):
        if forced:
            self.forced_calls += 1
        if forced or self._current is None:
            self._current = self._tokens.pop(0)
        return self._current

    def close(self):
        pass


@pytest.fixture
def app(api):
    with GitHubApp(api, FakeAuth("ghs_stale_token", "ghs_fresh_token")) as app:
        yield app


def _sweep_threads():
    return [t for t in threading.enumerate() if t.name.endswith("-sweep") and t.is_alive()]


def test_close_stops_every_sweep_thread(api):
    before = set(_sweep_threads())
    api.add("GET", "repos/octo-org/app/actions/runs", FakeResponse({"workflow_runs": [RUN]}))
    api.add("GET", "repos/octo-org/app/actions/runs/30433642/artifacts", FakeResponse({"artifacts": []}))

    with GitHubApp(api, FakeAuth("ghs_t")) as app:
        token = app.auth.token(1)
        app.repo_runs("octo-org", "app", token)
        app.artifacts("octo-org", "app", 30433642, token)
        assert len(set(_sweep_threads()) - before) == 2

    assert set(_sweep_threads()) - before == set()


def test_with_token_refresh_retries_once_on_401(app):
    seen = []

    def call(token):
        seen.append(token.token)
        if token.token == "ghs_stale_token":
            raise GitHubAuthError(status_code=401, endpoint="x", message="Bad credentials")
        return "ok"

    assert list_artifacts.with_token_refresh(app, 1, call) == "ok"
    assert seen == ["ghs_stale_token", "ghs_fresh_token"]
    assert app.auth.forced_calls == 1


def test_with_token_refresh_gives_up_after_one_retry(app):
    def call(token):
        raise GitHubAuthError(status_code=401, endpoint="x", message="Bad credentials")

    with pytest.raises(GitHubAuthError):
        list_artifacts.with_token_refresh(app, 1, call)
    assert app.auth.forced_calls == 1


def test_collect_runs_with_urls(app, api):
    api.add("GET", RUNS_URL, FakeResponse({"workflow_runs": [RUN]}))
    api.add("GET", "repos/octo-org/app/actions/runs/30433642/artifacts", FakeResponse({"artifacts": [{"id": 11, "name": "dist"}]}))
    api.add(
        "GET",
        "repos/octo-org/app/actions/artifacts/11/zip",
        FakeResponse(None, status_code=302, headers={"Location": "https://blob.example/dist.zip"}),
    )

    runs = list_artifacts.collect_runs(
        app,
        owner="octo-org",
        repo="app",
        token=InstallationToken("ghs_t"),
        workflow="ci.yml",
        branch="main",
        max_runs=1,
        with_urls=True,
    )

    assert runs == [
        {
            "run_id": 30433642,
            "branch": "main",
            "workflow_id": 161335,
            "artifacts": [{"id": 11, "name": "dist", "url": "https://blob.example/dist.zip"}],
        }
    ]


def test_main_prints_json(monkeypatch, tmp_path, capsys, app, api):
    monkeypatch.delenv("GITHUB_APP_CONFIG", raising=False)
    monkeypatch.setenv("GITHUB_APP_ID", "4242")
    monkeypatch.setenv("GITHUB_APP_PRIVATE_KEY", str(tmp_path / "unused.pem"))
    monkeypatch.setattr(GitHubApp, "from_config", classmethod(lambda cls, config, debug_rest=False: app))
    api.add("GET", "repos/octo-org/app/actions/runs", FakeResponse({"workflow_runs": [RUN]}))
    api.add("GET", "repos/octo-org/app/actions/runs/30433642/artifacts", FakeResponse({"artifacts": []}))

    rc = list_artifacts.main(["octo-org/app", "--installation-id", "9", "--config", str(tmp_path / "none.yml")])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{"run_id": 30433642, "branch": "main", "workflow_id": 161335, "artifacts": []}]


def test_main_reports_config_error(monkeypatch, tmp_path, capsys):
    for name in ("GITHUB_APP_CONFIG", "GITHUB_APP_ID", "GITHUB_APP_PRIVATE_KEY"):
        monkeypatch.delenv(name, raising=False)
    rc = list_artifacts.main(["octo-org/app", "--installation-id", "9", "--config", str(tmp_path / "none.yml")])
    assert rc == 1
    assert "not configured" in capsys.readouterr().err


def test_main_rejects_bad_repo():
    with pytest.raises(SystemExit):
        list_artifacts.main(["not-a-repo", "--installation-id", "9"])

"""Tests for the reelguess CLI commands."""

import httpx
import pytest
from click.testing import CliRunner

from reelguess.cli import main
from reelguess.cli import next_cmd

CREDENTIAL_KEYS = ("TMDB_TOKEN", "TMDB_API_KEY", "OMDB_API_KEY")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def no_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so monkeypatch also undoes values a .env file sets later
    for key in CREDENTIAL_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


class TestCheckEnv:
    def test_valid_environment(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        no_credentials: None,
        catalog_env: dict[str, str],
    ) -> None:
        for key, value in catalog_env.items():
            monkeypatch.setenv(key, value)

        result = runner.invoke(main, ["check-env"])

        assert result.exit_code == 0
        assert "Environment variables validated successfully" in result.output

    def test_missing_keys_fail(self, runner: CliRunner, no_credentials: None) -> None:
        result = runner.invoke(main, ["check-env"])

        assert result.exit_code == 1
        assert "Missing TMDB authentication" in result.output
        assert "Missing OMDB_API_KEY" in result.output

    def test_dotenv_file_is_loaded(
        self,
        runner: CliRunner,
        no_credentials: None,
        tmp_path,
    ) -> None:
        (tmp_path / ".env").write_text("# keys\nTMDB_API_KEY='v3key'\nOMDB_API_KEY=omdb-123456\n")

        result = runner.invoke(main, ["check-env"])

        assert result.exit_code == 0
        assert "Using TMDB_API_KEY (v3)" in result.output


class TestNext:
    def test_requires_credentials_without_server(
        self, runner: CliRunner, no_credentials: None
    ) -> None:
        result = runner.invoke(main, ["next"])
        assert result.exit_code == 1

    def test_serves_rounds_from_server(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        no_credentials: None,
    ) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            n = len(requests)
            return httpx.Response(200, json={
                "movie_title": f"Movie {n}",
                "movie_id": n,
                "release_year": "1984-06-08",
                "imdb_rating": "7.8",
                "trailer_link": f"https://yt.test/k{n}",
            })

        monkeypatch.setattr(
            next_cmd,
            "_make_client",
            lambda config: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        result = runner.invoke(main, [
            "next", "-n", "2",
            "--start-year", "1980", "--end-year", "1989",
            "--capacity", "1", "--concurrency", "1",
            "--timeout", "2",
            "--server", "http://game.test",
        ])

        assert result.exit_code == 0, result.output
        assert "Movie 1" in result.output
        assert "Movie 2" in result.output
        assert "timed out" not in result.output
        assert requests[0].url.path == "/api/random-movie"
        assert all(r.url.params.get("startYear") == "1980-01-01" for r in requests)
        assert all(r.url.params.get("endYear") == "1989-12-31" for r in requests)

    def test_reports_timeouts(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        no_credentials: None,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "none"})

        monkeypatch.setattr(
            next_cmd,
            "_make_client",
            lambda config: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        result = runner.invoke(main, ["next", "-n", "1", "--timeout", "0.05", "--server", "http://x"])

        assert result.exit_code == 0, result.output
        assert "1 round(s) timed out" in result.output


class TestMain:
    def test_bad_config_file_exits(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("server:\n  prot: 1\n")

        result = runner.invoke(main, ["--config", str(path), "check-env"])

        assert result.exit_code == 1

    def test_serve_runs_uvicorn(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict] = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))

        result = runner.invoke(main, ["serve", "--port", "9123"])

        assert result.exit_code == 0, result.output
        assert calls == [{"host": "127.0.0.1", "port": 9123, "log_config": None}]

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--version"])
        assert "0.1.0" in result.output

"""Integration tests for the movie and prefetch API endpoints.

The catalog is replaced by an in-memory fake so the app runs without
TMDB or OMDb access.
"""

import re

import pytest
from fastapi.testclient import TestClient

from reelguess.catalog.models import MovieResult
from reelguess.config import ReelguessConfig, ServerConfig
from reelguess.server.main import create_app

pytestmark = pytest.mark.integration


class FakeCatalog:
    """Returns a new playable movie per call, or a fixed outcome."""

    def __init__(self, *, empty: bool = False, error: Exception | None = None) -> None:
        self.empty = empty
        self.error = error
        self.calls: list[tuple[str | None, str | None, str | None]] = []

    async def random_movie(self, start_date=None, end_date=None, language=None):
        self.calls.append((start_date, end_date, language))
        if self.error is not None:
            raise self.error
        if self.empty:
            return None
        movie_id = len(self.calls)
        return MovieResult(
            movie_title=f"Movie {movie_id}",
            movie_id=movie_id,
            release_year="2001-05-04",
            imdb_rating="7.1",
            trailer_link=f"https://www.youtube-nocookie.com/embed/key{movie_id}",
        )


def make_client(
    catalog_env: dict[str, str],
    catalog: FakeCatalog | None = None,
    *,
    max_requests: int = 30,
) -> TestClient:
    config = ReelguessConfig(server=ServerConfig(rate_limit_max_requests=max_requests))
    app = create_app(config, catalog=catalog or FakeCatalog(), environ=catalog_env)
    return TestClient(app)


# =============================================================================
# /api/random-movie
# =============================================================================


class TestRandomMovieEndpoint:
    def test_returns_movie_with_rate_limit_headers(self, catalog_env: dict[str, str]) -> None:
        catalog = FakeCatalog()
        with make_client(catalog_env, catalog) as client:
            response = client.get(
                "/api/random-movie",
                params={"startYear": "1995-01-01", "endYear": "2005-12-31", "language": "de-DE"},
            )

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"movie_title", "movie_id", "release_year", "imdb_rating", "trailer_link"}
        assert data["movie_id"] == 1
        assert response.headers["X-RateLimit-Limit"] == "30"
        assert response.headers["X-RateLimit-Remaining"] == "29"
        assert re.fullmatch(
            r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", response.headers["X-RateLimit-Reset"]
        )
        assert catalog.calls == [("1995-01-01", "2005-12-31", "de-DE")]

    def test_no_playable_movie_is_404(self, catalog_env: dict[str, str]) -> None:
        with make_client(catalog_env, FakeCatalog(empty=True)) as client:
            response = client.get("/api/random-movie")

        assert response.status_code == 404
        assert response.json() == {"error": "Failed to find a valid movie after multiple attempts"}
        assert "X-RateLimit-Limit" in response.headers

    def test_rate_limit_exceeded_is_429(self, catalog_env: dict[str, str]) -> None:
        with make_client(catalog_env, max_requests=2) as client:
            statuses = [client.get("/api/random-movie").status_code for _ in range(3)]
            last = client.get("/api/random-movie")

        assert statuses == [200, 200, 429]
        assert last.json() == {"error": "Rate limit exceeded. Please try again later."}
        assert last.headers["X-RateLimit-Remaining"] == "0"

    def test_forwarded_clients_are_limited_separately(self, catalog_env: dict[str, str]) -> None:
        with make_client(catalog_env, max_requests=1) as client:
            first = client.get("/api/random-movie", headers={"X-Forwarded-For": "10.0.0.1"})
            second = client.get("/api/random-movie", headers={"X-Forwarded-For": "10.0.0.2"})
            repeat = client.get("/api/random-movie", headers={"X-Forwarded-For": "10.0.0.1"})

        assert (first.status_code, second.status_code, repeat.status_code) == (200, 200, 429)

    def test_missing_credentials_is_500(self) -> None:
        with make_client({"TMDB_TOKEN": "eyJonly"}) as client:
            response = client.get("/api/random-movie")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Server not configured. Please check environment variables."
        }

    def test_catalog_failure_is_500(self, catalog_env: dict[str, str]) -> None:
        catalog = FakeCatalog(error=RuntimeError("tmdb exploded"))
        with make_client(catalog_env, catalog) as client:
            response = client.get("/api/random-movie")

        assert response.status_code == 500
        assert response.json() == {"error": "Unexpected error"}


# =============================================================================
# /api/prefetch
# =============================================================================


class TestPrefetchEndpoints:
    def test_next_serves_buffered_movies(self, catalog_env: dict[str, str]) -> None:
        catalog = FakeCatalog()
        with make_client(catalog_env, catalog) as client:
            first = client.get(
                "/api/prefetch/next",
                params={"startYear": 1990, "endYear": 1999, "language": "en-GB", "timeout": 2},
            )
            second = client.get(
                "/api/prefetch/next",
                params={"startYear": 1990, "endYear": 1999, "language": "en-GB", "timeout": 2},
            )
            stats = client.get("/api/prefetch/stats").json()

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["movie_id"] != second.json()["movie_id"]
        assert catalog.calls[0] == ("1990-01-01", "1999-12-31", "en-GB")
        assert set(stats) == {
            "queued",
            "servedImmediate",
            "servedAfterWait",
            "timeouts",
            "inFlightMax",
        }
        assert stats["servedImmediate"] + stats["servedAfterWait"] == 2
        assert 1 <= stats["inFlightMax"] <= 2

    def test_next_times_out_with_404(self, catalog_env: dict[str, str]) -> None:
        with make_client(catalog_env, FakeCatalog(empty=True)) as client:
            response = client.get("/api/prefetch/next", params={"timeout": 0.1})
            stats = client.get("/api/prefetch/stats").json()

        assert response.status_code == 404
        assert response.json() == {"error": "No movie available within deadline"}
        assert stats["timeouts"] == 1

    def test_next_rejects_invalid_timeout(self, catalog_env: dict[str, str]) -> None:
        with make_client(catalog_env) as client:
            assert client.get("/api/prefetch/next", params={"timeout": 0}).status_code == 422
            assert client.get("/api/prefetch/next", params={"timeout": 60}).status_code == 422

    def test_stats_reset(self, catalog_env: dict[str, str]) -> None:
        with make_client(catalog_env, FakeCatalog(empty=True)) as client:
            client.get("/api/prefetch/next", params={"timeout": 0.05})
            before = client.get("/api/prefetch/stats").json()
            after = client.post("/api/prefetch/stats/reset").json()

        assert before["timeouts"] == 1
        assert after == {
            "queued": 0,
            "servedImmediate": 0,
            "servedAfterWait": 0,
            "timeouts": 0,
            "inFlightMax": 0,
        }

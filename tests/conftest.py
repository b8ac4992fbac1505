"""Pytest fixtures for Reelguess tests."""

import os
from collections.abc import Iterator

import pytest

from reelguess.catalog.models import MovieResult
from reelguess.config import reset_config


@pytest.fixture
def sample_movie() -> MovieResult:
    """Create a playable movie for testing."""
    return MovieResult(
        movie_title="Fight Club",
        movie_id=550,
        release_year="1999-10-15",
        imdb_rating="8.8",
        trailer_link="https://www.youtube-nocookie.com/embed/qtRKdVHc-cE",
    )


@pytest.fixture
def catalog_env() -> dict[str, str]:
    """A complete set of catalog credentials."""
    return {
        "TMDB_TOKEN": "eyJhbGciOiJIUzI1NiJ9.test",
        "OMDB_API_KEY": "omdb-123456",
    }


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep tests away from real config files and REELGUESS_* variables."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in [k for k in os.environ if k.startswith("REELGUESS_")]:
        monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()

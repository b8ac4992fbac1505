"""TMDB/OMDb catalog client.

Finds a random movie that can be played as a round: it must have an IMDb
rating (via OMDb) and a YouTube trailer (via TMDB videos). Each lookup
samples a random discover page, so consecutive calls rarely repeat.

    GET /discover/movie          random page of popular movies in the window
    GET /movie/{id}              details, for the IMDb id
    GET omdbapi.com/?i={imdb_id} rating
    GET /movie/{id}/videos       trailer key
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import httpx

from reelguess.catalog.models import MovieResult, resolve_date_window, resolve_language
from reelguess.config import CatalogConfig
from reelguess.foundation.env import CatalogCredentials
from reelguess.foundation.errors import ErrorCode, catalog_error, config_error
from reelguess.foundation.utils import pick, random_int_inclusive

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MovieCatalog:
    """Random-movie lookups against TMDB and OMDb.

    The HTTP client is owned by the caller so tests can mount an
    ``httpx.MockTransport`` and the server can share one connection pool.
    """

    client: httpx.AsyncClient
    credentials: CatalogCredentials
    config: CatalogConfig = field(default_factory=CatalogConfig)

    async def random_movie(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        language: str | None = None,
    ) -> MovieResult | None:
        """Return a playable random movie, or None after max_attempts misses.

        Args:
            start_date: Lower release bound (YYYY-MM-DD), defaults to 1990-01-01
            end_date: Upper release bound (YYYY-MM-DD), defaults to end of this year
            language: TMDB language tag such as ``en-US``

        Raises:
            ReelguessError: If credentials are missing or TMDB is unreachable.
        """
        if not self.credentials.is_complete:
            raise config_error(
                ErrorCode.CONFIG_ENV_INVALID,
                detail="TMDB_TOKEN or TMDB_API_KEY, and OMDB_API_KEY are required",
            )
        start, end = resolve_date_window(
            start_date, end_date, default_start=self.config.default_start_date
        )
        lang = resolve_language(language, self.config.default_language)

        for attempt in range(1, self.config.max_attempts + 1):
            movie = await self._try_once(start, end, lang)
            if movie is not None:
                return movie
            logger.debug("catalog attempt %d found no playable movie", attempt)
        return None

    async def _try_once(self, start: str, end: str, language: str) -> MovieResult | None:
        page = random_int_inclusive(1, self.config.max_page)
        discover = await self._tmdb("/discover/movie", self._discover_params(start, end, language, page))
        if not discover.is_success:
            # Random page out of range; fall back to the first page.
            discover = await self._tmdb(
                "/discover/movie", self._discover_params(start, end, language, 1, minimal=True)
            )
        if not discover.is_success:
            return None

        results = _json(discover).get("results")
        movie = pick(results if isinstance(results, list) else [])
        if not isinstance(movie, dict) or "id" not in movie:
            return None
        movie_id = movie["id"]

        details = await self._tmdb(f"/movie/{movie_id}", {"language": language})
        if not details.is_success:
            return None
        imdb_id = _json(details).get("imdb_id")
        if not imdb_id:
            return None

        rating = await self._imdb_rating(imdb_id)
        if rating is None:
            return None

        videos = await self._tmdb(f"/movie/{movie_id}/videos", {"language": language})
        if not videos.is_success:
            return None
        video_results = _json(videos).get("results")
        trailer = next(
            (
                v for v in (video_results if isinstance(video_results, list) else [])
                if isinstance(v, dict) and v.get("site") == "YouTube" and v.get("type") == "Trailer"
            ),
            None,
        )
        if trailer is None or not trailer.get("key"):
            return None

        return MovieResult(
            movie_title=str(movie.get("title", "")),
            movie_id=int(movie_id),
            release_year=str(movie.get("release_date", "")),
            imdb_rating=rating,
            trailer_link=f"{self.config.trailer_base_url}{trailer['key']}",
        )

    def _discover_params(
        self,
        start: str,
        end: str,
        language: str,
        page: int,
        *,
        minimal: bool = False,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if not minimal:
            params["primary_release_date.gte"] = start
            params["primary_release_date.lte"] = end
        params.update({
            "include_adult": "false",
            "include_video": "false",
            "sort_by": "popularity.desc",
            "language": language,
            "page": page,
        })
        return params

    async def _imdb_rating(self, imdb_id: str) -> str | None:
        """Fetch the IMDb rating from OMDb; None when absent or non-numeric."""
        response = await self._get(
            self.config.omdb_base_url,
            params={"i": imdb_id, "apikey": self.credentials.omdb_api_key},
        )
        if not response.is_success:
            return None
        rating = _json(response).get("imdbRating")
        if not rating or rating == "N/A":
            return None
        try:
            value = float(rating)
        except (TypeError, ValueError):
            return None
        if math.isnan(value):
            return None
        return str(rating)

    async def _tmdb(self, path: str, params: dict[str, Any]) -> httpx.Response:
        url = f"{self.config.tmdb_base_url.rstrip('/')}/{path.lstrip('/')}"
        if self.credentials.tmdb_api_key:
            params = {**params, "api_key": self.credentials.tmdb_api_key}
        headers = {"Accept": "application/json"}
        if self.credentials.tmdb_token:
            headers["Authorization"] = f"Bearer {self.credentials.tmdb_token}"
        return await self._get(url, params=params, headers=headers)

    async def _get(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await self.client.get(
                url, params=params, headers=headers, timeout=self.config.request_timeout
            )
        except httpx.TimeoutException as e:
            raise catalog_error(ErrorCode.CATALOG_TIMEOUT, host=httpx.URL(url).host, cause=e) from e
        except httpx.TransportError as e:
            raise catalog_error(
                ErrorCode.CATALOG_UNAVAILABLE, host=httpx.URL(url).host, detail=str(e), cause=e
            ) from e


def _json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else reads as empty."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

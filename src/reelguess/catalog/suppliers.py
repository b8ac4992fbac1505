"""Prefetch suppliers producing movie rounds.

``CatalogSupplier`` talks to TMDB/OMDb directly. ``RemoteMovieSupplier`` asks
a running reelguess server, the way the browser client does.
"""

import logging
from typing import Any

import httpx

from reelguess.catalog.models import MovieResult, normalize_language, normalize_year
from reelguess.catalog.tmdb import MovieCatalog
from reelguess.foundation.errors import ErrorCode, catalog_error
from reelguess.prefetch.types import PrefetchFilters

logger = logging.getLogger(__name__)

RANDOM_MOVIE_PATH = "/api/random-movie"


def filter_query(filters: PrefetchFilters) -> dict[str, str]:
    """Translate prefetch filters into ``/api/random-movie`` query params."""
    params: dict[str, str] = {}
    if start := normalize_year(filters.start_year, "start"):
        params["startYear"] = start
    if end := normalize_year(filters.end_year, "end"):
        params["endYear"] = end
    if language := normalize_language(filters.language):
        params["language"] = language
    return params


class CatalogSupplier:
    """Supplier backed by a :class:`MovieCatalog`."""

    def __init__(self, catalog: MovieCatalog) -> None:
        self._catalog = catalog

    async def __call__(self, filters: PrefetchFilters) -> MovieResult | None:
        params = filter_query(filters)
        movie = await self._catalog.random_movie(
            start_date=params.get("startYear"),
            end_date=params.get("endYear"),
            language=params.get("language"),
        )
        if movie is None or not movie.is_playable():
            return None
        return movie


class RemoteMovieSupplier:
    """Supplier calling ``GET {base_url}/api/random-movie``.

    Non-2xx responses and unplayable payloads read as "no candidate";
    transport failures raise.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}{RANDOM_MOVIE_PATH}"

    async def __call__(self, filters: PrefetchFilters) -> MovieResult | None:
        try:
            response = await self._client.get(self._url, params=filter_query(filters))
        except httpx.TransportError as e:
            raise catalog_error(
                ErrorCode.CATALOG_UNAVAILABLE, host=httpx.URL(self._url).host, detail=str(e), cause=e
            ) from e

        if not response.is_success:
            logger.debug("random-movie returned HTTP %d", response.status_code)
            return None
        try:
            data: Any = response.json()
            movie = MovieResult.from_payload(data)
        except (ValueError, KeyError, TypeError):
            logger.debug("random-movie returned an unusable payload")
            return None
        return movie if movie.is_playable() else None

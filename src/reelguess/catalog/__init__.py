"""Movie catalog: TMDB/OMDb lookups and the suppliers built on them."""

from reelguess.catalog.models import (
    MovieResult,
    normalize_language,
    normalize_year,
    resolve_date_window,
    resolve_language,
)
from reelguess.catalog.suppliers import CatalogSupplier, RemoteMovieSupplier, filter_query
from reelguess.catalog.tmdb import MovieCatalog

__all__ = [
    "CatalogSupplier",
    "MovieCatalog",
    "MovieResult",
    "RemoteMovieSupplier",
    "filter_query",
    "normalize_language",
    "normalize_year",
    "resolve_date_window",
    "resolve_language",
]

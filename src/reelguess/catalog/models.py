"""Movie payloads and the filter normalization shared by client and server."""

import math
import re
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Literal

LANGUAGE_PATTERN = re.compile(r"^[a-z]{2,3}-[A-Z]{2}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_YEAR = 1900
MAX_YEAR = 2100
DEFAULT_START_DATE = "1990-01-01"
DEFAULT_LANGUAGE = "en-US"


@dataclass(frozen=True, slots=True)
class MovieResult:
    """One playable round: a movie with its trailer and IMDb rating."""

    movie_title: str
    movie_id: int
    release_year: str
    imdb_rating: str | None
    trailer_link: str

    @property
    def id(self) -> int:
        return self.movie_id

    @property
    def rating(self) -> float | None:
        """IMDb rating as a number, or None when missing or non-numeric."""
        if self.imdb_rating is None:
            return None
        try:
            value = float(self.imdb_rating)
        except ValueError:
            return None
        return None if math.isnan(value) else value

    def is_playable(self) -> bool:
        """A round needs a trailer and a numeric rating to guess."""
        return bool(self.trailer_link) and self.rating is not None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "MovieResult":
        """Build from the JSON wire shape.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If movie_id is not an integer.
        """
        rating = data.get("imdb_rating")
        return cls(
            movie_title=str(data["movie_title"]),
            movie_id=int(data["movie_id"]),
            release_year=str(data.get("release_year") or ""),
            imdb_rating=None if rating is None else str(rating),
            trailer_link=str(data.get("trailer_link") or ""),
        )

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


def normalize_year(year: Any, boundary: Literal["start", "end"]) -> str | None:
    """Format a year as a discover date bound, clamped to 1900-2100.

    Returns ``YYYY-01-01`` for a start bound and ``YYYY-12-31`` for an end
    bound, or None when ``year`` is not a finite number.
    """
    if isinstance(year, bool) or not isinstance(year, int | float):
        return None
    if not math.isfinite(year):
        return None
    safe_year = min(max(math.trunc(year), MIN_YEAR), MAX_YEAR)
    return f"{safe_year}-01-01" if boundary == "start" else f"{safe_year}-12-31"


def normalize_language(language: str | None) -> str | None:
    """Return the tag when it looks like ``en-US``, else None."""
    if not language:
        return None
    trimmed = language.strip()
    return trimmed if LANGUAGE_PATTERN.match(trimmed) else None


def resolve_date_window(
    start: str | None,
    end: str | None,
    *,
    today: date | None = None,
    default_start: str = DEFAULT_START_DATE,
) -> tuple[str, str]:
    """Apply server-side defaults to discover date bounds.

    Missing or malformed values fall back to ``default_start`` and the
    last day of the current year.
    """
    default_end = f"{(today or date.today()).year}-12-31"
    start_date = start if start and DATE_PATTERN.match(start) else default_start
    end_date = end if end and DATE_PATTERN.match(end) else default_end
    return start_date, end_date


def resolve_language(language: str | None, default: str = DEFAULT_LANGUAGE) -> str:
    return normalize_language(language) or default

"""Shared Pydantic models for API routes."""

from pydantic import BaseModel, ConfigDict


def _to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    """Base model with camelCase JSON serialization."""

    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class MoviePayload(BaseModel):
    """A playable round. Field names match the game client's wire shape."""

    movie_title: str
    movie_id: int
    release_year: str
    imdb_rating: str | None
    trailer_link: str


class StatsResponse(CamelModel):
    queued: int
    served_immediate: int
    served_after_wait: int
    timeouts: int
    in_flight_max: int

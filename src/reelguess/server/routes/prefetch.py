"""Prefetch buffer endpoints: serve the next round and expose stats."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from reelguess.prefetch.types import PrefetchFilters
from reelguess.server.routes._models import MoviePayload, StatsResponse
from reelguess.server.services import AppServices, get_services

router = APIRouter(prefix="/api/prefetch", tags=["prefetch"])


@router.get("/next", response_model=MoviePayload)
async def next_movie(
    start_year: int | None = Query(default=None, alias="startYear"),
    end_year: int | None = Query(default=None, alias="endYear"),
    language: str | None = Query(default=None),
    timeout: float | None = Query(default=None, gt=0, le=30),
    services: AppServices = Depends(get_services),
) -> MoviePayload | JSONResponse:
    """Serve the next buffered movie for these filters."""
    buffer = services.require_buffer()
    buffer.set_filters(PrefetchFilters(start_year=start_year, end_year=end_year, language=language))
    movie = await buffer.next(timeout)
    if movie is None:
        return JSONResponse({"error": "No movie available within deadline"}, status_code=404)
    return MoviePayload(**movie.to_payload())


@router.get("/stats", response_model=StatsResponse)
async def get_stats(services: AppServices = Depends(get_services)) -> StatsResponse:
    return StatsResponse(**services.require_buffer().stats().to_dict())


@router.post("/stats/reset", response_model=StatsResponse)
async def reset_stats(services: AppServices = Depends(get_services)) -> StatsResponse:
    buffer = services.require_buffer()
    buffer.reset_stats()
    return StatsResponse(**buffer.stats().to_dict())

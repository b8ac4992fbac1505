"""Random movie endpoint used by the game client's supplier."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from reelguess.foundation.errors import ReelguessError
from reelguess.server.ratelimit import client_identifier
from reelguess.server.services import AppServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["movies"])


def _iso_timestamp(timestamp: float) -> str:
    """Format as UTC ISO-8601 with milliseconds and a Z suffix."""
    moment = datetime.fromtimestamp(timestamp, UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/random-movie")
async def random_movie(
    request: Request,
    start_year: str | None = Query(default=None, alias="startYear"),
    end_year: str | None = Query(default=None, alias="endYear"),
    language: str | None = Query(default=None),
    services: AppServices = Depends(get_services),
) -> JSONResponse:
    """Find one playable movie in the requested release window.

    Malformed dates and language tags fall back to server defaults.
    """
    try:
        services.ensure_env_valid()
    except ReelguessError as e:
        logger.error("%s", e)
        return JSONResponse(
            {"error": "Server not configured. Please check environment variables."},
            status_code=500,
        )

    host = request.client.host if request.client else None
    limit = services.limiter.check(client_identifier(request.headers, fallback=host))
    headers = {
        "X-RateLimit-Limit": str(limit.limit),
        "X-RateLimit-Remaining": str(limit.remaining),
        "X-RateLimit-Reset": _iso_timestamp(limit.reset_at),
    }
    if not limit.success:
        return JSONResponse(
            {"error": "Rate limit exceeded. Please try again later."},
            status_code=429,
            headers=headers,
        )

    try:
        movie = await services.require_catalog().random_movie(
            start_date=start_year,
            end_date=end_year,
            language=language,
        )
    except Exception:
        logger.exception("random-movie lookup failed")
        return JSONResponse({"error": "Unexpected error"}, status_code=500)

    if movie is None:
        return JSONResponse(
            {"error": "Failed to find a valid movie after multiple attempts"},
            status_code=404,
            headers=headers,
        )
    payload: dict[str, Any] = movie.to_payload()
    return JSONResponse(payload, headers=headers)

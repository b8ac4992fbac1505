"""Application-owned collaborators shared by the API routes.

One ``AppServices`` instance lives on ``app.state`` for the lifetime of the
server. Routes reach it through :func:`get_services`.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from fastapi import Request

from reelguess.catalog.models import MovieResult
from reelguess.catalog.tmdb import MovieCatalog
from reelguess.config import ReelguessConfig
from reelguess.foundation.env import validate_env
from reelguess.foundation.errors import ErrorCode, config_error
from reelguess.prefetch.buffer import PrefetchBuffer
from reelguess.server.ratelimit import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Everything the routes need, built once per application."""

    config: ReelguessConfig
    limiter: RateLimiter
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    catalog: MovieCatalog | None = None
    buffer: PrefetchBuffer[MovieResult] | None = None
    _env_validated: bool = field(default=False, init=False)

    def ensure_env_valid(self) -> None:
        """Validate catalog credentials on first use.

        Raises:
            ReelguessError: If required variables are missing.
        """
        if self._env_validated:
            return
        result = validate_env(self.environ)
        for warning in result.warnings:
            logger.warning(warning)
        if not result.is_valid:
            raise config_error(ErrorCode.CONFIG_ENV_INVALID, detail="\n".join(result.errors))
        self._env_validated = True

    def require_catalog(self) -> MovieCatalog:
        if self.catalog is None:
            raise RuntimeError("catalog is not initialized; is the app lifespan running?")
        return self.catalog

    def require_buffer(self) -> PrefetchBuffer[MovieResult]:
        if self.buffer is None:
            raise RuntimeError("prefetch buffer is not initialized; is the app lifespan running?")
        return self.buffer


def get_services(request: Request) -> AppServices:
    return request.app.state.services

"""FastAPI application for the trailer game backend.

Serves random playable movies to game clients and owns the process-wide
prefetch buffer. The lifespan creates the HTTP client, catalog and buffer,
and tears the buffer down on shutdown.
"""

import contextlib
import logging
import os
from collections.abc import AsyncIterator, Mapping

import httpx
from fastapi import FastAPI

from reelguess.catalog.suppliers import CatalogSupplier
from reelguess.catalog.tmdb import MovieCatalog
from reelguess.config import ReelguessConfig, get_config
from reelguess.foundation.env import CatalogCredentials
from reelguess.prefetch.buffer import PrefetchBuffer
from reelguess.server.ratelimit import RateLimiter
from reelguess.server.routes import movies, prefetch
from reelguess.server.services import AppServices

logger = logging.getLogger(__name__)


def create_app(
    config: ReelguessConfig | None = None,
    *,
    catalog: MovieCatalog | None = None,
    environ: Mapping[str, str] | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Settings; defaults to the loaded global config.
        catalog: Catalog to use instead of one built from the environment.
        environ: Environment holding catalog credentials (default os.environ).

    Returns:
        Configured FastAPI application.
    """
    config = config or get_config()
    env = os.environ if environ is None else environ
    services = AppServices(
        config=config,
        limiter=RateLimiter(
            interval=config.server.rate_limit_interval,
            max_requests=config.server.rate_limit_max_requests,
        ),
        environ=env,
        catalog=catalog,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with httpx.AsyncClient(timeout=config.catalog.request_timeout) as client:
            if services.catalog is None:
                services.catalog = MovieCatalog(
                    client=client,
                    credentials=CatalogCredentials.from_env(env),
                    config=config.catalog,
                )
            services.buffer = PrefetchBuffer.from_config(
                CatalogSupplier(services.catalog),
                config.prefetch,
            )
            logger.debug("prefetch buffer ready (capacity=%d)", services.buffer.capacity)
            try:
                yield
            finally:
                await services.buffer.aclose()

    app = FastAPI(
        title="Reelguess",
        description="Trailer rating guessing game backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services
    app.include_router(movies.router)
    app.include_router(prefetch.router)
    return app

"""Serve rounds through the prefetch buffer from the terminal.

Commands:
    reelguess next                          - Serve 3 rounds from TMDB directly
    reelguess next --server http://host     - Serve rounds via a running server
"""

import asyncio

import click
import httpx

from reelguess.catalog.models import MovieResult
from reelguess.catalog.suppliers import CatalogSupplier, RemoteMovieSupplier
from reelguess.catalog.tmdb import MovieCatalog
from reelguess.cli.helpers import console, movies_table, stats_table, stderr_console
from reelguess.config import ReelguessConfig, get_config
from reelguess.foundation.env import CatalogCredentials
from reelguess.prefetch.buffer import PrefetchBuffer
from reelguess.prefetch.types import PrefetchFilters, PrefetchStats, Supplier


def _make_client(config: ReelguessConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.catalog.request_timeout)


@click.command("next")
@click.option("--count", "-n", default=3, show_default=True, type=click.IntRange(min=1),
              help="Rounds to serve")
@click.option("--start-year", type=int, default=None, help="Earliest release year")
@click.option("--end-year", type=int, default=None, help="Latest release year")
@click.option("--language", default=None, help="Language tag, e.g. en-US")
@click.option("--capacity", type=int, default=None, help="Override buffer capacity")
@click.option("--concurrency", type=int, default=None, help="Override fetch concurrency")
@click.option("--timeout", type=float, default=None, help="Seconds to wait per round")
@click.option("--server", default=None, help="Use a running reelguess server at this URL")
def next_rounds(
    count: int,
    start_year: int | None,
    end_year: int | None,
    language: str | None,
    capacity: int | None,
    concurrency: int | None,
    timeout: float | None,
    server: str | None,
) -> None:
    """Serve rounds through the prefetch buffer and show its stats.

    \b
    Examples:
        reelguess next -n 5 --start-year 1980 --end-year 1989
        reelguess next --server http://127.0.0.1:8000
    """
    config = get_config()
    credentials = CatalogCredentials.from_env()
    if server is None and not credentials.is_complete:
        stderr_console.print(
            "[red]Missing catalog credentials.[/red] Run 'reelguess check-env' for details."
        )
        raise SystemExit(1)

    filters = PrefetchFilters(start_year=start_year, end_year=end_year, language=language)
    movies, stats = asyncio.run(
        _serve_rounds(config, credentials, filters, count, capacity, concurrency, timeout, server)
    )

    if movies:
        console.print(movies_table(movies))
    if len(movies) < count:
        console.print(f"[yellow]{count - len(movies)} round(s) timed out[/yellow]")
    console.print(stats_table(stats))


async def _serve_rounds(
    config: ReelguessConfig,
    credentials: CatalogCredentials,
    filters: PrefetchFilters,
    count: int,
    capacity: int | None,
    concurrency: int | None,
    timeout: float | None,
    server: str | None,
) -> tuple[list[MovieResult], PrefetchStats]:
    async with _make_client(config) as client:
        supplier: Supplier[MovieResult]
        if server:
            supplier = RemoteMovieSupplier(client, server)
        else:
            supplier = CatalogSupplier(MovieCatalog(client, credentials, config.catalog))

        movies: list[MovieResult] = []
        async with PrefetchBuffer.from_config(supplier, config.prefetch) as buffer:
            buffer.set_filters(filters)
            buffer.configure(capacity=capacity, concurrency=concurrency)
            with console.status("Fetching rounds..."):
                for _ in range(count):
                    movie = await buffer.next(timeout)
                    if movie is not None:
                        movies.append(movie)
            stats = buffer.stats()
    return movies, stats

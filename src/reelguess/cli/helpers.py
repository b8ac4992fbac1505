"""Shared helper functions for CLI commands."""

import os
from pathlib import Path

from rich.console import Console
from rich.table import Table

from reelguess.catalog.models import MovieResult
from reelguess.prefetch.types import PrefetchStats

console = Console()
# Separate stderr console for warnings keeps stdout clean for piping
stderr_console = Console(stderr=True)


def load_dotenv(path: Path | None = None) -> None:
    """Load .env file if it exists. Existing variables win."""
    env_file = path or Path.cwd() / ".env"
    if not env_file.exists():
        return
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                value = value.strip().strip("'\"")
                os.environ.setdefault(key.strip(), value)


def movies_table(movies: list[MovieResult]) -> Table:
    table = Table(title="Rounds")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Released")
    table.add_column("IMDb", justify="right", style="cyan")
    table.add_column("Trailer", overflow="fold")
    for i, movie in enumerate(movies, 1):
        table.add_row(
            str(i),
            movie.movie_title,
            movie.release_year,
            movie.imdb_rating or "-",
            movie.trailer_link,
        )
    return table


def stats_table(stats: PrefetchStats) -> Table:
    table = Table(title="Prefetch stats", show_header=False)
    table.add_column("Counter", style="dim")
    table.add_column("Value", justify="right")
    for name, value in stats.to_dict().items():
        table.add_row(name.replace("_", " "), str(value))
    return table

"""Environment check command.

Commands:
    reelguess check-env    - Validate TMDB/OMDb credentials
"""

import click

from reelguess.cli.helpers import console
from reelguess.foundation.env import validate_env


@click.command("check-env")
def check_env() -> None:
    """Validate the catalog credentials in the environment.

    \b
    Required:
        TMDB_TOKEN (v4) or TMDB_API_KEY (v3)
        OMDB_API_KEY
    """
    result = validate_env()

    if result.is_valid:
        console.print("[green]Environment variables validated successfully[/green]")
    else:
        console.print("[red]Environment validation failed:[/red]\n")
        for error in result.errors:
            console.print(f"[red]✗[/red] {error}")

    if result.warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"[yellow]![/yellow] {warning}")

    if not result.is_valid:
        console.print(
            "\n[dim]Tip: create a .env file in the project root with the required variables.[/dim]"
        )
        raise SystemExit(1)

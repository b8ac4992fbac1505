"""Main CLI entry point.

    reelguess check-env     Validate TMDB/OMDb credentials
    reelguess next          Serve rounds through the prefetch buffer
    reelguess serve         Run the HTTP backend
"""

import click

from reelguess.cli.env_cmd import check_env
from reelguess.cli.helpers import load_dotenv, stderr_console
from reelguess.cli.next_cmd import next_rounds
from reelguess.cli.serve_cmd import serve
from reelguess.config import load_config
from reelguess.foundation.errors import ReelguessError
from reelguess.foundation.logging import configure_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging (prefetch activity)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to a config.yaml")
@click.version_option(version="0.1.0")
def main(debug: bool, config_path: str | None) -> None:
    """Reelguess: guess the IMDb rating from the trailer.

    \b
    Get started:
        reelguess check-env     Make sure API keys are set
        reelguess next          Fetch a few rounds
        reelguess serve         Run the backend
    """
    load_dotenv()
    try:
        config = load_config(config_path)
    except ReelguessError as e:
        stderr_console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    configure_logging(debug=debug or config.debug)


main.add_command(check_env)
main.add_command(next_rounds)
main.add_command(serve)

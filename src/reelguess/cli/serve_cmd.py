"""Run the HTTP server."""

import click

from reelguess.cli.helpers import console
from reelguess.config import get_config


@click.command("serve")
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
def serve(host: str | None, port: int | None) -> None:
    """Start the game backend with uvicorn."""
    import uvicorn

    from reelguess.server import create_app

    config = get_config()
    bind_host = host or config.server.host
    bind_port = port or config.server.port
    console.print(f"[green]Serving on http://{bind_host}:{bind_port}[/green]")
    uvicorn.run(create_app(config), host=bind_host, port=bind_port, log_config=None)

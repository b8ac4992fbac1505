"""HTTP server for the trailer game backend."""

from reelguess.server.main import create_app

__all__ = ["create_app"]

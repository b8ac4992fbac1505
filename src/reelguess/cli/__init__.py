"""Command-line interface."""

from reelguess.cli.main import main

__all__ = ["main"]

"""Foundation layer: errors, logging, environment and small utilities."""

from reelguess.foundation.errors import ErrorCode, ReelguessError
from reelguess.foundation.logging import configure_logging

__all__ = [
    "ErrorCode",
    "ReelguessError",
    "configure_logging",
]

"""Logging configuration for Reelguess.

Provides centralized logging setup with sensible defaults:
- Default: WARNING level (quiet operation)
- --debug flag: DEBUG level with full context
- REELGUESS_DEBUG=true or REELGUESS_LOG_LEVEL=DEBUG env vars: Override for CI/scripting

Prefetch buffer activity (queued, served, timeouts) is logged at DEBUG under
``reelguess.prefetch.buffer``, so ``--debug`` is the switch for tuning it.

Priority for level resolution (highest to lowest):
    1. Explicit `level` parameter (programmatic override)
    2. REELGUESS_LOG_LEVEL env var (any level: DEBUG, INFO, WARNING, etc.)
    3. REELGUESS_DEBUG=true env var (simple boolean)
    4. `debug=True` parameter (--debug flag)
    5. WARNING (default)
"""

import logging
import os
import sys
from typing import TextIO

_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_DEFAULT_FORMAT = "%(name)s: %(message)s"

# Noisy libraries we want to quiet even in debug mode
_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "asyncio",
    "uvicorn.access",
)


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: TextIO | None = None,
) -> int:
    """Configure root logging for the CLI and the server.

    Args:
        debug: Enable DEBUG level with detailed format
        level: Override log level (int or string like "DEBUG", "INFO")
        stream: Output stream (default: stderr)

    Returns:
        The resolved numeric level.
    """
    resolved_level: int
    if level is not None:
        resolved_level = _parse_level(level)
    elif env_level := os.environ.get("REELGUESS_LOG_LEVEL"):
        resolved_level = _parse_level(env_level)
    elif os.environ.get("REELGUESS_DEBUG", "").lower() in ("true", "1", "yes"):
        resolved_level = logging.DEBUG
    elif debug:
        resolved_level = logging.DEBUG
    else:
        resolved_level = logging.WARNING

    fmt = _DEBUG_FORMAT if resolved_level <= logging.DEBUG else _DEFAULT_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved_level)
    handler.setFormatter(logging.Formatter(fmt))
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, debug=%s",
        logging.getLevelName(resolved_level),
        debug,
    )
    return resolved_level


def _parse_level(level: int | str) -> int:
    """Parse log level from int or string."""
    if isinstance(level, int):
        return level
    numeric = getattr(logging, level.upper(), None)
    if isinstance(numeric, int):
        return numeric
    try:
        return int(level)
    except ValueError:
        return logging.WARNING

"""Reelguess configuration management.

Loads configuration from .reelguess/config.yaml with sensible defaults.
All settings can be overridden via environment variables (REELGUESS_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .reelguess/config.yaml (project-local)
3. ~/.reelguess/config.yaml (user-global)
4. Built-in defaults

Thread Safety:
    Uses threading.Lock for thread-safe lazy initialization of the cached
    config returned by get_config().
"""

import copy
import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from reelguess.foundation.errors import ErrorCode, config_error

logger = logging.getLogger(__name__)

ENV_PREFIX = "REELGUESS_"


@dataclass
class BackoffConfig:
    """Retry backoff between empty supplier responses."""

    initial_ms: float = 120.0
    """Base delay in milliseconds."""

    factor: float = 1.6
    """Growth factor per attempt."""

    jitter_ms: float = 80.0
    """Upper bound of the additive random jitter."""

    max_ms: float = 1500.0
    """Delay cap in milliseconds."""


@dataclass
class PrefetchConfig:
    """Configuration for the background prefetch buffer."""

    capacity: int = 3
    """Number of ready items kept warm."""

    concurrency: int = 2
    """Maximum simultaneous supplier calls."""

    max_attempts: int = 6
    """Supplier calls per launched attempt before giving up."""

    timeout: float = 8.0
    """Default seconds next() waits on an empty buffer."""

    poll_interval: float = 0.05
    """Seconds between queue checks while next() waits."""

    refill_delay: float = 0.01
    """Seconds before a fill cycle re-arms itself."""

    backoff: BackoffConfig = field(default_factory=BackoffConfig)


@dataclass
class CatalogConfig:
    """Configuration for the TMDB/OMDb catalog client."""

    tmdb_base_url: str = "https://api.themoviedb.org/3"
    omdb_base_url: str = "https://www.omdbapi.com/"
    trailer_base_url: str = "https://www.youtube-nocookie.com/embed/"
    request_timeout: float = 10.0
    max_attempts: int = 5
    """Discover/details/rating/videos rounds per random_movie() call."""

    max_page: int = 500
    """Highest discover page sampled."""

    default_language: str = "en-US"
    default_start_date: str = "1990-01-01"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8000
    rate_limit_interval: float = 60.0
    """Length of one rate-limit window in seconds."""

    rate_limit_max_requests: int = 30
    """Requests allowed per client per window."""


@dataclass
class ReelguessConfig:
    """Root configuration for Reelguess."""

    prefetch: PrefetchConfig = field(default_factory=PrefetchConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    debug: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Global config instance (lazy-loaded, thread-safe)
_config: ReelguessConfig | None = None
_config_lock = threading.Lock()


def _deep_update(base: dict, updates: Mapping) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> bool | int | float | str:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config_dict: dict, environ: Mapping[str, str]) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: REELGUESS_SECTION_KEY, with one
    nested level for the backoff policy.

    Examples:
        REELGUESS_PREFETCH_CAPACITY=5
        REELGUESS_PREFETCH_BACKOFF_MAX_MS=2000
        REELGUESS_SERVER_PORT=9000
    """
    for key, raw in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path_str = key[len(ENV_PREFIX):].lower()

        if path_str == "debug":
            config_dict["debug"] = _coerce(raw)
            continue

        for section, values in config_dict.items():
            if not isinstance(values, dict) or not path_str.startswith(section + "_"):
                continue
            remaining = path_str[len(section) + 1:]
            target = values
            for sub, sub_values in values.items():
                if isinstance(sub_values, dict) and remaining.startswith(sub + "_"):
                    target = sub_values
                    remaining = remaining[len(sub) + 1:]
                    break
            if remaining in target and not isinstance(target[remaining], dict):
                target[remaining] = _coerce(raw)
            else:
                logger.debug("Ignoring unknown config override %s", key)
            break

    return config_dict


def _dict_to_config(data: dict) -> ReelguessConfig:
    """Convert a dict to ReelguessConfig."""
    try:
        prefetch_data = dict(data.get("prefetch", {}))
        backoff = BackoffConfig(**prefetch_data.pop("backoff", {}))
        return ReelguessConfig(
            prefetch=PrefetchConfig(backoff=backoff, **prefetch_data),
            catalog=CatalogConfig(**data.get("catalog", {})),
            server=ServerConfig(**data.get("server", {})),
            debug=bool(data.get("debug", False)),
        )
    except TypeError as e:
        raise config_error(ErrorCode.CONFIG_INVALID, key="config", detail=str(e)) from e


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ReelguessConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (REELGUESS_*)
    2. Explicit path if provided
    3. .reelguess/config.yaml (project-local)
    4. ~/.reelguess/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Merged ReelguessConfig instance.
    """
    global _config

    config_dict = copy.deepcopy(ReelguessConfig().to_dict())

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(".reelguess/config.yaml"),
        Path.home() / ".reelguess" / "config.yaml",
    ])

    for config_path in config_paths:
        if not config_path.exists():
            continue
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Skipping unreadable config %s: %s", config_path, e)
            continue
        if not isinstance(file_config, dict):
            logger.warning("Skipping config %s: top level must be a mapping", config_path)
            continue
        _deep_update(config_dict, file_config)
        logger.debug("Loaded config from %s", config_path)
        break  # Use first found config

    config_dict = _apply_env_overrides(config_dict, os.environ if environ is None else environ)

    _config = _dict_to_config(config_dict)
    return _config


def get_config() -> ReelguessConfig:
    """Get the current configuration, loading if needed."""
    global _config

    if _config is not None:
        return _config

    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Reset cached configuration (for testing)."""
    global _config
    with _config_lock:
        _config = None

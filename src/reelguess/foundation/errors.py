"""Structured error types for Reelguess.

Errors carry a numeric code, a formatted message and recovery hints so the
CLI and the HTTP layer can render them consistently.

Example:
    >>> err = ReelguessError(
    ...     code=ErrorCode.CONFIG_ENV_MISSING,
    ...     context={"var": "OMDB_API_KEY"},
    ... )
    >>> print(err)
    [RG-5003] Environment variable 'OMDB_API_KEY' not set.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Categories:
        5xxx - Configuration errors
        7xxx - Catalog/network errors
    """

    # 5xxx - Configuration Errors
    CONFIG_INVALID = 5002
    CONFIG_ENV_MISSING = 5003
    CONFIG_ENV_INVALID = 5004

    # 7xxx - Catalog/Network Errors
    CATALOG_UNAVAILABLE = 7001
    CATALOG_TIMEOUT = 7002

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {5: "config", 7: "catalog"}.get(prefix, "unknown")

    @property
    def is_recoverable(self) -> bool:
        """Whether this error type is typically recoverable."""
        return self.category == "catalog"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",
    ErrorCode.CONFIG_ENV_MISSING: "Environment variable '{var}' not set.",
    ErrorCode.CONFIG_ENV_INVALID: "Environment validation failed:\n{detail}",
    ErrorCode.CATALOG_UNAVAILABLE: "Cannot reach {host}: {detail}",
    ErrorCode.CATALOG_TIMEOUT: "Request to {host} timed out.",
}


RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.CONFIG_ENV_MISSING: [
        "Set the environment variable: export {var}=<value>",
        "Add it to your .env file",
        "Run 'reelguess check-env' for details",
    ],
    ErrorCode.CONFIG_ENV_INVALID: [
        "Get a TMDB key at https://www.themoviedb.org/settings/api",
        "Get an OMDb key at https://www.omdbapi.com/apikey.aspx",
    ],
    ErrorCode.CATALOG_UNAVAILABLE: [
        "Check your network connection",
        "Retry in a few seconds",
    ],
}


class ReelguessError(Exception):
    """Base error type for all Reelguess errors."""

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def recovery_hints(self) -> list[str]:
        """Get recovery suggestions for this error."""
        formatted = []
        for hint in RECOVERY_HINTS.get(self.code, []):
            try:
                formatted.append(hint.format(**self.context))
            except KeyError:
                formatted.append(hint)
        return formatted

    @property
    def is_recoverable(self) -> bool:
        return self.code.is_recoverable

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'RG-5003')."""
        return f"RG-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"ReelguessError(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging/API responses."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.code.category,
            "message": self.message,
            "recoverable": self.is_recoverable,
            "recovery_hints": self.recovery_hints,
        }


def config_error(code: ErrorCode, var: str = "", key: str = "", detail: str = "") -> ReelguessError:
    """Create a configuration error."""
    return ReelguessError(code=code, context={"var": var, "key": key, "detail": detail})


def catalog_error(
    code: ErrorCode,
    host: str,
    detail: str = "",
    cause: Exception | None = None,
) -> ReelguessError:
    """Create a catalog/network error."""
    return ReelguessError(code=code, context={"host": host, "detail": detail}, cause=cause)

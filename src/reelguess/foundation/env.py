"""Validation of the catalog credentials held in environment variables.

The catalog needs a TMDB credential (v4 read token or v3 API key) and an
OMDb key for ratings. Missing keys are errors, suboptimal ones warnings.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from reelguess.foundation.errors import ErrorCode, config_error


@dataclass(frozen=True, slots=True)
class EnvValidation:
    """Outcome of :func:`validate_env`."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True, slots=True)
class CatalogCredentials:
    """Credentials used by the catalog client."""

    tmdb_token: str | None = None
    tmdb_api_key: str | None = None
    omdb_api_key: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CatalogCredentials":
        env = os.environ if environ is None else environ
        return cls(
            tmdb_token=env.get("TMDB_TOKEN") or None,
            tmdb_api_key=env.get("TMDB_API_KEY") or None,
            omdb_api_key=env.get("OMDB_API_KEY") or None,
        )

    @property
    def is_complete(self) -> bool:
        return bool((self.tmdb_token or self.tmdb_api_key) and self.omdb_api_key)


def validate_env(environ: Mapping[str, str] | None = None) -> EnvValidation:
    """Check the catalog credentials and return errors and warnings."""
    creds = CatalogCredentials.from_env(environ)
    errors: list[str] = []
    warnings: list[str] = []

    if not creds.tmdb_token and not creds.tmdb_api_key:
        errors.append(
            "Missing TMDB authentication: Either TMDB_TOKEN or TMDB_API_KEY must be set.\n"
            "Get your API key at: https://www.themoviedb.org/settings/api"
        )
    elif not creds.tmdb_token:
        warnings.append(
            "Using TMDB_API_KEY (v3). Consider using TMDB_TOKEN (v4) for better performance.\n"
            "Get your v4 token at: https://www.themoviedb.org/settings/api"
        )

    if not creds.omdb_api_key:
        errors.append(
            "Missing OMDB_API_KEY: Required for fetching IMDb ratings.\n"
            "Get your free API key at: https://www.omdbapi.com/apikey.aspx"
        )
    elif len(creds.omdb_api_key) < 6:
        warnings.append("OMDB_API_KEY looks too short. Make sure you copied the full key.")

    if creds.tmdb_token and not creds.tmdb_token.startswith("eyJ"):
        warnings.append(
            "TMDB_TOKEN doesn't look like a JWT token. Make sure you're using "
            "the v4 Read Access Token, not the API key."
        )

    return EnvValidation(errors=tuple(errors), warnings=tuple(warnings))


def get_env_var(key: str, environ: Mapping[str, str] | None = None) -> str:
    """Return a required environment variable.

    Raises:
        ReelguessError: If the variable is unset or empty.
    """
    env = os.environ if environ is None else environ
    value = env.get(key)
    if not value:
        raise config_error(ErrorCode.CONFIG_ENV_MISSING, var=key)
    return value


def get_env_with_fallback(*keys: str, environ: Mapping[str, str] | None = None) -> str | None:
    """Return the first non-empty value among ``keys``."""
    env = os.environ if environ is None else environ
    for key in keys:
        if value := env.get(key):
            return value
    return None

"""Environment-driven settings for nearauth.

Environment variables (all overridable via constructor args):
    NEARAUTH_MAINNET_API_URL   – key registry for mainnet accounts
                                 (default https://api.fastnear.com)
    NEARAUTH_TESTNET_API_URL   – key registry for ``*.testnet`` accounts
                                 (default https://test.api.fastnear.com)
    NEARAUTH_HTTP_TIMEOUT      – ownership lookup timeout in seconds (default 10)
    NEARAUTH_NONCE_MAX_AGE_MS  – default nonce freshness window (default 24h)
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from .errors import ConfigError

DEFAULT_MAINNET_API_URL = "https://api.fastnear.com"
DEFAULT_TESTNET_API_URL = "https://test.api.fastnear.com"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_NONCE_MAX_AGE_MS = 24 * 60 * 60 * 1000


_N = TypeVar("_N", int, float)


def _env_number(name: str, default: _N, cast: Callable[[str], _N]) -> _N:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    mainnet_api_url: str = DEFAULT_MAINNET_API_URL
    testnet_api_url: str = DEFAULT_TESTNET_API_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    nonce_max_age_ms: int = DEFAULT_NONCE_MAX_AGE_MS

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``NEARAUTH_*`` environment variables.

        Raises:
            ConfigError: If a numeric variable does not parse.
        """
        return cls(
            mainnet_api_url=os.environ.get(
                "NEARAUTH_MAINNET_API_URL", DEFAULT_MAINNET_API_URL
            ).rstrip("/"),
            testnet_api_url=os.environ.get(
                "NEARAUTH_TESTNET_API_URL", DEFAULT_TESTNET_API_URL
            ).rstrip("/"),
            http_timeout=_env_number(
                "NEARAUTH_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT, float
            ),
            nonce_max_age_ms=_env_number(
                "NEARAUTH_NONCE_MAX_AGE_MS", DEFAULT_NONCE_MAX_AGE_MS, int
            ),
        )


@functools.lru_cache(maxsize=None)
def default_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    return Settings.from_env()

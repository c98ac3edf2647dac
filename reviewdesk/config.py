"""ReviewDesk configuration -- layered: CLI flags > env vars > .env file > defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger("reviewdesk.config")


def _load_env_file(start: Path | None = None) -> dict[str, str]:
    """Return the key-value pairs of the nearest ``.env`` file.

    Walks up from ``start`` (default: CWD) until a ``.env`` file or a
    repository root (``.git``) is found.  Does NOT inject the values into
    ``os.environ``.
    """
    cwd = start or Path.cwd()
    for parent in [cwd, *cwd.parents]:
        env_file = parent / ".env"
        if env_file.is_file():
            pairs = {k: v for k, v in dotenv_values(env_file).items() if v is not None}
            logger.debug("Loaded %d vars from %s", len(pairs), env_file)
            return pairs
        if (parent / ".git").exists():
            break
    return {}


# Module-level cache so the file is read at most once per process.
_env_file: dict[str, str] | None = None


def _get_env_file() -> dict[str, str]:
    global _env_file
    if _env_file is None:
        _env_file = _load_env_file()
    return _env_file


def reset_env_cache() -> None:
    """Forget the cached ``.env`` contents (for testing)."""
    global _env_file
    _env_file = None


def _env(key: str, default: str = "") -> str:
    """Look up a config value: environment > .env file > default."""
    val = os.environ.get(key)
    if val:
        return val
    val = _get_env_file().get(key)
    if val:
        return val
    return default


@dataclass
class ReviewDeskConfig:
    """Configuration for a review session."""

    # Connection
    api_url: str = field(
        default_factory=lambda: _env("REVIEWDESK_API_URL", default="http://127.0.0.1:3000")
    )
    timeout: float = field(
        default_factory=lambda: float(_env("REVIEWDESK_TIMEOUT", default="30.0"))
    )
    max_retries: int = field(
        default_factory=lambda: int(_env("REVIEWDESK_MAX_RETRIES", default="3"))
    )
    retry_delay: float = field(
        default_factory=lambda: float(_env("REVIEWDESK_RETRY_DELAY", default="0.5"))
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: _env("REVIEWDESK_LOG_LEVEL", default="WARNING")
    )
    log_format: str = field(
        default_factory=lambda: _env("REVIEWDESK_LOG_FORMAT", default="text")
    )
    log_file: str | None = field(
        default_factory=lambda: _env("REVIEWDESK_LOG_FILE") or None
    )

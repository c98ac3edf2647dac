"""CodeEdit server configuration -- repository root, bind address, logging."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class CodeEditConfig:
    """Top-level configuration for the CodeEdit service."""

    repo_root: str = field(
        default_factory=lambda: os.environ.get("CODEEDIT_REPO_ROOT", os.getcwd())
    )
    host: str = field(
        default_factory=lambda: os.environ.get("CODEEDIT_HOST", "127.0.0.1")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("CODEEDIT_PORT", "3000"))
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("CODEEDIT_LOG_LEVEL", "INFO")
    )
    allowed_origins: list[str] = field(
        default_factory=lambda: os.environ.get("ALLOWED_ORIGINS", "*").split(",")
    )
    max_results: int = field(
        default_factory=lambda: int(os.environ.get("CODEEDIT_MAX_RESULTS", "2000"))
    )


# Singleton for convenience
_config: CodeEditConfig | None = None


def get_config() -> CodeEditConfig:
    """Get or create the global CodeEdit configuration."""
    global _config
    if _config is None:
        _config = CodeEditConfig()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None

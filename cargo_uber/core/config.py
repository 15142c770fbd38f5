"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

MANIFEST_NAME = "Cargo.toml"
UPSTREAM_REMOTE = "upstream"

_DEFAULT_GIT_TIMEOUT = 5.0


@dataclass(frozen=True)
class Settings:
    """Environment-driven knobs.

    Reads from environment variables:
        CARGO_UBER_LOG_LEVEL   — log level (default: WARNING)
        CARGO_UBER_LOG_FORMAT  — console | json (default: console)
        CARGO_UBER_GIT_TIMEOUT — seconds allowed per git query (default: 5)
    """

    log_level: str = "WARNING"
    log_format: str = "console"
    git_timeout: float = _DEFAULT_GIT_TIMEOUT

    @classmethod
    def from_env(cls) -> Settings:
        raw_timeout = os.environ.get("CARGO_UBER_GIT_TIMEOUT")
        try:
            git_timeout = float(raw_timeout) if raw_timeout else _DEFAULT_GIT_TIMEOUT
        except ValueError:
            git_timeout = _DEFAULT_GIT_TIMEOUT
        return cls(
            log_level=os.environ.get("CARGO_UBER_LOG_LEVEL", "WARNING").upper(),
            log_format=os.environ.get("CARGO_UBER_LOG_FORMAT", "console").lower(),
            git_timeout=git_timeout,
        )

"""Runtime settings for index range maintenance, sourced from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_MS = 250
DEFAULT_RECOVERY_TIMEOUT_SECONDS = 30.0
DEFAULT_EVENT_WORKERS = 4


@dataclass(frozen=True)
class IndexRangeSettings:
    # Extra wait after the cluster reports an index healthy; its statistics
    # can lag the health transition by a few milliseconds.
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS
    recovery_timeout_seconds: float = DEFAULT_RECOVERY_TIMEOUT_SECONDS
    event_workers: int = DEFAULT_EVENT_WORKERS

    @property
    def settle_delay_seconds(self) -> float:
        return self.settle_delay_ms / 1000.0

    @classmethod
    def from_env(cls) -> "IndexRangeSettings":
        return cls(
            settle_delay_ms=_env_number("INDEX_RANGE_SETTLE_DELAY_MS", DEFAULT_SETTLE_DELAY_MS, int),
            recovery_timeout_seconds=_env_number(
                "INDEX_RANGE_RECOVERY_TIMEOUT_SECONDS", DEFAULT_RECOVERY_TIMEOUT_SECONDS, float
            ),
            event_workers=_env_number("INDEX_RANGE_EVENT_WORKERS", DEFAULT_EVENT_WORKERS, int),
        )


def _env_number(name: str, default, cast):
    raw: Optional[str] = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s.", name, raw, default)
        return default
    if value < 0:
        logger.warning("Negative %s=%r; using default %s.", name, raw, default)
        return default
    return value


@lru_cache(maxsize=None)
def get_settings() -> IndexRangeSettings:
    """Return the cached settings."""
    return IndexRangeSettings.from_env()


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()

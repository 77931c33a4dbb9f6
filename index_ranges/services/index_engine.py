"""Index engine abstraction: timestamp statistics, recovery waits and readiness."""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from urllib.parse import quote

import requests

from index_ranges.errors import (
    IndexEngineUnavailableError,
    ReadinessTimeoutError,
    StatisticsUnavailableError,
)
from index_ranges.utils.settings import IndexRangeSettings, get_settings
from index_ranges.utils.timestamps import ensure_utc, from_millis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimestampStats:
    min: datetime
    max: datetime

    def __post_init__(self):
        object.__setattr__(self, "min", ensure_utc(self.min))
        object.__setattr__(self, "max", ensure_utc(self.max))


@dataclass
class IndexEngineConfig:
    base_url: str = "http://localhost:9200"
    timestamp_field: str = "timestamp"
    index_pattern: str = "*"
    request_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "IndexEngineConfig":
        timeout = os.getenv("ELASTICSEARCH_TIMEOUT_SECONDS")
        try:
            request_timeout = float(timeout) if timeout else 10.0
        except ValueError:
            logger.warning("Invalid ELASTICSEARCH_TIMEOUT_SECONDS=%r; using 10s.", timeout)
            request_timeout = 10.0
        return cls(
            base_url=os.getenv("ELASTICSEARCH_URL", "http://localhost:9200").rstrip("/"),
            timestamp_field=os.getenv("INDEX_TIMESTAMP_FIELD", "timestamp"),
            index_pattern=os.getenv("INDEX_PATTERN", "*"),
            request_timeout=request_timeout,
        )


class IndexEngine:
    """Capabilities the range service needs from the index engine."""

    def timestamp_stats(self, index_name: str) -> TimestampStats:
        raise NotImplementedError

    def wait_for_recovery(self, index_name: str, timeout: float) -> None:
        raise NotImplementedError

    def list_indices(self) -> List[str]:
        raise NotImplementedError


class ElasticsearchIndexEngine(IndexEngine):
    """HTTP adapter for an Elasticsearch compatible cluster."""

    def __init__(self, config: Optional[IndexEngineConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or IndexEngineConfig.from_env()
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{path}"

    def timestamp_stats(self, index_name: str) -> TimestampStats:
        field_name = self.config.timestamp_field
        body = {
            "size": 0,
            "aggs": {
                "ts_min": {"min": {"field": field_name}},
                "ts_max": {"max": {"field": field_name}},
            },
        }
        try:
            resp = self._session.post(
                self._url(f"{quote(index_name, safe='')}/_search"),
                json=body,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            raise StatisticsUnavailableError(index_name, str(exc)) from exc
        if resp.status_code == 404:
            raise StatisticsUnavailableError(index_name, "index does not exist")
        if resp.status_code >= 400:
            raise StatisticsUnavailableError(index_name, f"HTTP {resp.status_code}")

        aggregations = (resp.json() or {}).get("aggregations") or {}
        min_value = (aggregations.get("ts_min") or {}).get("value")
        max_value = (aggregations.get("ts_max") or {}).get("value")
        if min_value is None or max_value is None:
            raise StatisticsUnavailableError(index_name, "index contains no messages")
        return TimestampStats(min=from_millis(int(min_value)), max=from_millis(int(max_value)))

    def wait_for_recovery(self, index_name: str, timeout: float) -> None:
        params = {"wait_for_status": "yellow", "timeout": f"{int(max(timeout, 0) * 1000)}ms"}
        try:
            resp = self._session.get(
                self._url(f"_cluster/health/{quote(index_name, safe='')}"),
                params=params,
                # leave the server a moment to answer after its own timeout
                timeout=timeout + self.config.request_timeout,
            )
        except requests.Timeout as exc:
            raise ReadinessTimeoutError(index_name, timeout) from exc
        except requests.RequestException as exc:
            # an unreachable cluster is not ready either
            logger.warning("Health check for %s failed: %s", index_name, exc)
            raise ReadinessTimeoutError(index_name, timeout) from exc
        if resp.status_code == 408:
            raise ReadinessTimeoutError(index_name, timeout)
        if resp.status_code >= 400:
            raise StatisticsUnavailableError(index_name, f"health check returned HTTP {resp.status_code}")
        if (resp.json() or {}).get("timed_out"):
            raise ReadinessTimeoutError(index_name, timeout)

    def list_indices(self) -> List[str]:
        try:
            resp = self._session.get(
                self._url(f"_cat/indices/{self.config.index_pattern}"),
                params={"format": "json", "h": "index,status"},
                timeout=self.config.request_timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise IndexEngineUnavailableError(f"listing indices failed: {exc}") from exc
        return sorted(row["index"] for row in resp.json() or [] if row.get("status") == "open")


class IndexReadiness:
    """Wait until an index can reliably serve statistics queries.

    The cluster reports an index healthy slightly before searches against it
    succeed, so a fixed settle delay follows the recovery wait.
    """

    def __init__(
        self,
        engine: IndexEngine,
        settings: Optional[IndexRangeSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.engine = engine
        self.settings = settings or get_settings()
        self._sleep = sleep

    def wait_until_ready(self, index_name: str) -> None:
        self.engine.wait_for_recovery(index_name, self.settings.recovery_timeout_seconds)
        if self.settings.settle_delay_ms > 0:
            self._sleep(self.settings.settle_delay_seconds)

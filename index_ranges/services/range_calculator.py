"""Derive a fresh index range from the index engine's timestamp statistics."""
from __future__ import annotations

import logging
import time
from typing import Callable

from index_ranges.db.schemas import IndexRange
from index_ranges.errors import StatisticsUnavailableError
from index_ranges.services.index_engine import IndexEngine
from index_ranges.utils.timestamps import now_utc, saturated_int32

logger = logging.getLogger(__name__)


class RangeCalculator:
    def __init__(self, engine: IndexEngine, clock: Callable = now_utc):
        self.engine = engine
        self._clock = clock

    def calculate_range(self, index_name: str) -> IndexRange:
        """Return the current range of ``index_name``. Nothing is persisted."""
        started = time.perf_counter()
        calculated_at = self._clock()
        try:
            stats = self.engine.timestamp_stats(index_name)
        except StatisticsUnavailableError:
            raise
        except Exception as exc:
            raise StatisticsUnavailableError(index_name, str(exc)) from exc
        took_ms = max(0, saturated_int32((time.perf_counter() - started) * 1000))

        logger.info("Calculated range of [%s] in [%dms].", index_name, took_ms)
        return IndexRange(
            index_name=index_name,
            begin=stats.min,
            end=stats.max,
            calculated_at=calculated_at,
            took_ms=took_ms,
        )

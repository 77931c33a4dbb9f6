"""High-level access to stored index ranges.

Wraps the repository functions with per-call sessions, presentation order,
and the range update notification published after every save.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from index_ranges.db.database import session_scope
from index_ranges.db.repositories import index_ranges as repo
from index_ranges.db.schemas import (
    IndexRange,
    RebuildFailure,
    RebuildSummary,
    sorted_ranges,
)
from index_ranges.errors import NotFoundError, StatisticsUnavailableError
from index_ranges.events import EventBus, IndexRangeUpdatedEvent
from index_ranges.services.index_engine import IndexEngine
from index_ranges.services.range_calculator import RangeCalculator

logger = logging.getLogger(__name__)


class IndexRangeService:
    def __init__(
        self,
        engine: IndexEngine,
        cluster_event_bus: EventBus,
        session_factory=None,
        calculator: Optional[RangeCalculator] = None,
    ) -> None:
        self.engine = engine
        self.cluster_event_bus = cluster_event_bus
        self._session_factory = session_factory
        self.calculator = calculator or RangeCalculator(engine)

    def get(self, index_name: str) -> IndexRange:
        with session_scope(self._session_factory) as db:
            record = repo.get_index_range(db, index_name)
            if record is None:
                raise NotFoundError(index_name)
            return IndexRange.from_record(record)

    def find(self, begin: datetime, end: datetime) -> List[IndexRange]:
        """Ranges intersecting ``[begin, end]``; empty when nothing matches."""
        with session_scope(self._session_factory) as db:
            records = repo.find_index_ranges(db, begin, end)
            return sorted_ranges(IndexRange.from_record(r) for r in records)

    def find_all(self) -> List[IndexRange]:
        with session_scope(self._session_factory) as db:
            return sorted_ranges(IndexRange.from_record(r) for r in repo.get_all_index_ranges(db))

    def save(self, index_range: IndexRange) -> None:
        with session_scope(self._session_factory) as db:
            repo.save_index_range(db, index_range)
        self.cluster_event_bus.post(IndexRangeUpdatedEvent(index_range.index_name))

    def delete(self, index_name: str) -> None:
        with session_scope(self._session_factory) as db:
            removed = repo.delete_index_range(db, index_name)
        logger.debug("Removed %d range record(s) for index %s", removed, index_name)

    def calculate_range(self, index_name: str) -> IndexRange:
        return self.calculator.calculate_range(index_name)

    def rebuild(self, index_name: str) -> IndexRange:
        index_range = self.calculate_range(index_name)
        self.save(index_range)
        return index_range

    def rebuild_all(self, index_names: Optional[Iterable[str]] = None) -> RebuildSummary:
        """Recalculate every named index (default: every open index).

        Indices without statistics, or whose range could not be stored, are
        reported in the summary; the rest of the batch still runs. Failing to
        list the open indices raises ``IndexEngineUnavailableError``.
        """
        names = list(index_names) if index_names is not None else self.engine.list_indices()
        summary = RebuildSummary()
        for index_name in names:
            try:
                summary.rebuilt.append(self.rebuild(index_name))
            except StatisticsUnavailableError as exc:
                logger.warning("Skipping range rebuild of %s: %s", index_name, exc)
                summary.failed.append(RebuildFailure(index_name=index_name, reason=str(exc)))
            except Exception as exc:
                logger.exception("Range rebuild of %s failed", index_name)
                summary.failed.append(RebuildFailure(index_name=index_name, reason=str(exc)))
        logger.info(
            "Rebuilt %d index range(s), %d failed", len(summary.rebuilt), len(summary.failed)
        )
        return summary


_index_range_service: Optional[IndexRangeService] = None


def configure_index_range_service(service: IndexRangeService) -> IndexRangeService:
    global _index_range_service
    _index_range_service = service
    return service


def get_index_range_service() -> IndexRangeService:
    if _index_range_service is None:
        raise RuntimeError("Index range service has not been configured")
    return _index_range_service


def reset_index_range_service_for_tests() -> None:  # pragma: no cover - used in tests
    global _index_range_service
    _index_range_service = None

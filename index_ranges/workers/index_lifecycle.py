"""
Index lifecycle handling for stored index ranges.

Keeps the range store consistent with the cluster:

    deleted  -> drop the range
    closed   -> drop the range (a closed index cannot be searched)
    reopened -> wait for the index, recalculate and save its range

Handlers keep no state between events and may run concurrently. Each index
in an event is handled on its own; a failure is logged and the rest of the
batch continues.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

from index_ranges.errors import ReadinessTimeoutError, StatisticsUnavailableError
from index_ranges.events import (
    EventBus,
    IndicesClosedEvent,
    IndicesDeletedEvent,
    IndicesReopenedEvent,
)
from index_ranges.services.index_engine import IndexReadiness
from index_ranges.services.index_range_service import IndexRangeService

logger = logging.getLogger(__name__)


@dataclass
class LifecycleResult:
    processed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class IndexLifecycleManager:
    def __init__(self, service: IndexRangeService, readiness: IndexReadiness):
        self.service = service
        self.readiness = readiness

    def register(self, event_bus: EventBus) -> None:
        event_bus.subscribe(IndicesDeletedEvent, self.handle_index_deletion)
        event_bus.subscribe(IndicesClosedEvent, self.handle_index_closing)
        event_bus.subscribe(IndicesReopenedEvent, self.handle_index_reopening)

    def handle_index_deletion(self, event: IndicesDeletedEvent) -> LifecycleResult:
        def _remove(index_name: str) -> None:
            logger.debug("Index %s has been deleted. Removing index range.", index_name)
            self.service.delete(index_name)

        return self._for_each_index(event.indices, _remove)

    def handle_index_closing(self, event: IndicesClosedEvent) -> LifecycleResult:
        def _remove(index_name: str) -> None:
            logger.debug("Index %s has been closed. Removing index range.", index_name)
            self.service.delete(index_name)

        return self._for_each_index(event.indices, _remove)

    def handle_index_reopening(self, event: IndicesReopenedEvent) -> LifecycleResult:
        def _recalculate(index_name: str) -> None:
            logger.debug("Index %s has been reopened. Calculating index range.", index_name)
            self.readiness.wait_until_ready(index_name)
            self.service.rebuild(index_name)

        return self._for_each_index(event.indices, _recalculate)

    def _for_each_index(self, indices, action: Callable[[str], None]) -> LifecycleResult:
        result = LifecycleResult()
        for index_name in indices:
            try:
                action(index_name)
            except ReadinessTimeoutError as exc:
                logger.warning("Index %s did not become ready, skipping: %s", index_name, exc)
                result.failed.append((index_name, str(exc)))
            except StatisticsUnavailableError as exc:
                logger.warning("Could not calculate range of index %s: %s", index_name, exc)
                result.failed.append((index_name, str(exc)))
            except Exception as exc:
                logger.exception("Failed to update index range of %s", index_name)
                result.failed.append((index_name, str(exc)))
            else:
                result.processed.append(index_name)
        return result

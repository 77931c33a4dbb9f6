"""
Index lifecycle events and the in-process event bus that delivers them.

Index change monitors post ``Indices*Event`` objects on the local bus; the
range service posts ``IndexRangeUpdatedEvent`` on the cluster bus so query
routers can drop cached range sets.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type

logger = logging.getLogger(__name__)


def _names(indices: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(indices, str):
        return (indices,)
    return tuple(indices)


@dataclass(frozen=True)
class _IndicesEvent:
    indices: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "indices", _names(self.indices))


@dataclass(frozen=True)
class IndicesDeletedEvent(_IndicesEvent):
    pass


@dataclass(frozen=True)
class IndicesClosedEvent(_IndicesEvent):
    pass


@dataclass(frozen=True)
class IndicesReopenedEvent(_IndicesEvent):
    pass


@dataclass(frozen=True)
class IndexRangeUpdatedEvent:
    index_name: str


Handler = Callable[[Any], Any]


class EventBus:
    """Type-keyed publish/subscribe.

    Handlers subscribe to an exact event class. With an executor each handler
    runs as its own task, so one event's handlers (and successive events) may
    execute concurrently; without one they run inline on the posting thread.
    A failing handler is logged and never affects the other handlers.
    """

    def __init__(self, name: str = "default", executor: Optional[Executor] = None):
        self.name = name
        self._executor = executor
        self._handlers: Dict[type, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    @classmethod
    def with_workers(cls, name: str, workers: int) -> "EventBus":
        if workers <= 0:
            return cls(name)
        return cls(name, ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"{name}-events"))

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        with self._lock:
            if handler not in self._handlers[event_type]:
                self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def handlers_for(self, event_type: Type) -> List[Handler]:
        with self._lock:
            return list(self._handlers.get(event_type, []))

    def post(self, event) -> List[Future]:
        """Deliver ``event``; returns futures when dispatching to an executor."""
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug("No handlers on bus %s for %s", self.name, type(event).__name__)
            return []
        if self._executor is None:
            for handler in handlers:
                self._dispatch(handler, event)
            return []
        return [self._executor.submit(self._dispatch, handler, event) for handler in handlers]

    def _dispatch(self, handler: Handler, event):
        try:
            return handler(event)
        except Exception:
            logger.exception(
                "Handler %s on bus %s failed for %s",
                getattr(handler, "__qualname__", repr(handler)),
                self.name,
                event,
            )
            return None

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

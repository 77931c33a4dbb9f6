import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "1")

from index_ranges.db import models
from index_ranges.errors import ReadinessTimeoutError, StatisticsUnavailableError
from index_ranges.events import EventBus, IndexRangeUpdatedEvent
from index_ranges.services.index_engine import IndexEngine, IndexReadiness, TimestampStats
from index_ranges.services.index_range_service import IndexRangeService
from index_ranges.utils.settings import IndexRangeSettings, refresh_settings_cache
from index_ranges.utils.timestamps import from_millis


def ms(value: int) -> datetime:
    return from_millis(value)


class FakeIndexEngine(IndexEngine):
    """In-memory index engine keyed by index name.

    ``stats`` maps index names to ``(min_ms, max_ms)``; indices missing from
    it behave like empty ones. Names in ``not_ready`` time out on recovery.
    """

    def __init__(self, stats=None, not_ready=(), open_indices=None):
        self.stats = dict(stats or {})
        self.not_ready = set(not_ready)
        self.open_indices = open_indices
        self.recovery_calls = []
        self.stats_calls = []

    def timestamp_stats(self, index_name):
        self.stats_calls.append(index_name)
        if index_name not in self.stats:
            raise StatisticsUnavailableError(index_name, "index contains no messages")
        lo, hi = self.stats[index_name]
        return TimestampStats(min=ms(lo), max=ms(hi))

    def wait_for_recovery(self, index_name, timeout):
        self.recovery_calls.append((index_name, timeout))
        if index_name in self.not_ready:
            raise ReadinessTimeoutError(index_name, timeout)

    def list_indices(self):
        if self.open_indices is not None:
            return list(self.open_indices)
        return sorted(self.stats)


@pytest.fixture(autouse=True)
def _reset_settings():
    refresh_settings_cache()
    yield
    refresh_settings_cache()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def index_engine():
    return FakeIndexEngine()


@pytest.fixture
def cluster_bus():
    return EventBus("cluster")


@pytest.fixture
def published(cluster_bus):
    events = []
    cluster_bus.subscribe(IndexRangeUpdatedEvent, events.append)
    return events


@pytest.fixture
def service(index_engine, cluster_bus, session_factory):
    return IndexRangeService(index_engine, cluster_bus, session_factory=session_factory)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def readiness(index_engine, sleeps):
    settings = IndexRangeSettings(settle_delay_ms=250, recovery_timeout_seconds=5.0, event_workers=0)
    return IndexReadiness(index_engine, settings, sleep=sleeps.append)


def make_range(index_name, begin_ms, end_ms, calculated_ms=0, took_ms=0):
    from index_ranges.db.schemas import IndexRange
    return IndexRange(
        index_name=index_name,
        begin=ms(begin_ms),
        end=ms(end_ms),
        calculated_at=ms(calculated_ms),
        took_ms=took_ms,
    )

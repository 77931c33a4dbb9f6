"""
FastAPI app assembly: logging, event bus wiring and router registration.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

from index_ranges.api.index_ranges import router as index_ranges_router
from index_ranges.events import EventBus
from index_ranges.services.index_engine import ElasticsearchIndexEngine, IndexReadiness
from index_ranges.services.index_range_service import (
    IndexRangeService,
    configure_index_range_service,
)
from index_ranges.utils.settings import get_settings
from index_ranges.workers.index_lifecycle import IndexLifecycleManager


def build_components(engine=None, settings=None, session_factory=None):
    """Wire buses, service and lifecycle manager for one process.

    Returns ``(service, manager, event_bus, cluster_event_bus)``. Index
    change monitors post lifecycle events on ``event_bus``; range updates are
    published on ``cluster_event_bus``.
    """
    settings = settings or get_settings()
    engine = engine or ElasticsearchIndexEngine()
    event_bus = EventBus.with_workers("local", settings.event_workers)
    cluster_event_bus = EventBus.with_workers("cluster", settings.event_workers)
    service = IndexRangeService(engine, cluster_event_bus, session_factory=session_factory)
    manager = IndexLifecycleManager(service, IndexReadiness(engine, settings))
    manager.register(event_bus)
    return service, manager, event_bus, cluster_event_bus


@asynccontextmanager
async def lifespan(app: FastAPI):
    service, manager, event_bus, cluster_event_bus = build_components()
    configure_index_range_service(service)
    app.state.index_range_service = service
    app.state.lifecycle_manager = manager
    app.state.event_bus = event_bus
    app.state.cluster_event_bus = cluster_event_bus
    logger.info("app_startup: log_level=%s settle_delay_ms=%s", LOG_LEVEL_NAME, get_settings().settle_delay_ms)
    try:
        yield
    finally:
        event_bus.shutdown()
        cluster_event_bus.shutdown()


app = FastAPI(
    title="Index Range Service",
    description="Tracks the timestamp span of every log index for time-bounded query routing.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(index_ranges_router)


@app.get("/health")
def health():
    return {"status": "ok"}

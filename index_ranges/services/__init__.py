"""Index range services and public helpers."""

from .index_engine import (
    ElasticsearchIndexEngine,
    IndexEngine,
    IndexEngineConfig,
    IndexReadiness,
    TimestampStats,
)
from .range_calculator import RangeCalculator
from .index_range_service import (
    IndexRangeService,
    configure_index_range_service,
    get_index_range_service,
    reset_index_range_service_for_tests,
)

__all__ = [
    "ElasticsearchIndexEngine",
    "IndexEngine",
    "IndexEngineConfig",
    "IndexReadiness",
    "TimestampStats",
    "RangeCalculator",
    "IndexRangeService",
    "configure_index_range_service",
    "get_index_range_service",
    "reset_index_range_service_for_tests",
]

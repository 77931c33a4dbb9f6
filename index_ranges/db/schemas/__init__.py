"""
Pydantic schemas exchanged by the repository, services and API.
"""

from .index_ranges import (
    IndexRange,
    IndexRangeList,
    RebuildFailure,
    RebuildSummary,
    sorted_ranges,
)

__all__ = [
    "IndexRange",
    "IndexRangeList",
    "RebuildFailure",
    "RebuildSummary",
    "sorted_ranges",
]

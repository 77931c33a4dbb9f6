"""
SQLAlchemy models for the index range store.
"""

from .base import Base
from .index_ranges import IndexRangeRecord

__all__ = [
    "Base",
    "IndexRangeRecord",
]

"""Exceptions raised by the index range services."""
from __future__ import annotations

from typing import Optional


class IndexRangeError(Exception):
    """Base class for index range failures."""


class NotFoundError(IndexRangeError, LookupError):
    """No index range is stored for the requested index."""

    def __init__(self, index_name: str):
        self.index_name = index_name
        super().__init__(f"Index range for index <{index_name}> not found.")


class StatisticsUnavailableError(IndexRangeError):
    """The index engine could not report timestamp statistics for an index."""

    def __init__(self, index_name: str, reason: Optional[str] = None):
        self.index_name = index_name
        self.reason = reason
        message = f"Timestamp statistics unavailable for index <{index_name}>"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ReadinessTimeoutError(StatisticsUnavailableError):
    """The index did not become ready within the allowed wait."""

    def __init__(self, index_name: str, timeout: float):
        self.timeout = timeout
        super().__init__(index_name, f"not ready after {timeout:g}s")


class IndexEngineUnavailableError(IndexRangeError):
    """The index engine could not be reached or refused a cluster-level request."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Index engine unavailable: {reason}")

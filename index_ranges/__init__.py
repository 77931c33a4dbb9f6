"""Timestamp range tracking for time-partitioned log indices."""

__version__ = "0.1.0"

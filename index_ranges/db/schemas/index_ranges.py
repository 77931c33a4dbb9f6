from datetime import datetime
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from index_ranges.utils.timestamps import ensure_utc, from_millis, to_millis, truncate_millis


class IndexRange(BaseModel):
    """Known timestamp span ``[begin, end]`` of one index.

    ``begin <= end`` is deliberately not validated; ranges are stored as the
    index engine reports them.
    """
    index_name: str
    begin: datetime
    end: datetime
    calculated_at: datetime
    took_ms: int = Field(default=0, ge=0)
    model_config = ConfigDict(frozen=True)

    @field_validator("begin", "end", "calculated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # storage keeps millisecond precision
        return truncate_millis(ensure_utc(value))

    def sort_key(self) -> Tuple[datetime, str]:
        """Presentation order: by ``begin``, ties broken by ``index_name``."""
        return (self.begin, self.index_name)

    def overlaps(self, begin: datetime, end: datetime) -> bool:
        return self.begin <= ensure_utc(end) and self.end >= ensure_utc(begin)

    @classmethod
    def from_record(cls, record) -> "IndexRange":
        return cls(
            index_name=record.index_name,
            begin=from_millis(record.begin),
            end=from_millis(record.end),
            calculated_at=from_millis(record.calculated_at),
            took_ms=record.took_ms or 0,
        )

    def to_columns(self) -> dict:
        return {
            "index_name": self.index_name,
            "begin": to_millis(self.begin),
            "end": to_millis(self.end),
            "calculated_at": to_millis(self.calculated_at),
            "took_ms": self.took_ms,
        }


def sorted_ranges(ranges) -> List[IndexRange]:
    """Deduplicate by index name and return in presentation order.

    When an index appears twice, the most recently calculated range wins.
    """
    latest = {}
    for index_range in ranges:
        current = latest.get(index_range.index_name)
        if current is None or index_range.calculated_at >= current.calculated_at:
            latest[index_range.index_name] = index_range
    return sorted(latest.values(), key=IndexRange.sort_key)


class IndexRangeList(BaseModel):
    ranges: List[IndexRange]
    total: int


class RebuildFailure(BaseModel):
    index_name: str
    reason: str


class RebuildSummary(BaseModel):
    rebuilt: List[IndexRange] = Field(default_factory=list)
    failed: List[RebuildFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

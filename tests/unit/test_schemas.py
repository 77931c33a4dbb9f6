from datetime import datetime, UTC

import pytest
from pydantic import ValidationError

from index_ranges.db.schemas import IndexRange, sorted_ranges
from tests.conftest import make_range, ms


def test_naive_datetimes_become_utc():
    index_range = IndexRange(
        index_name="graylog_0",
        begin=datetime(2025, 1, 1),
        end=datetime(2025, 1, 2),
        calculated_at=datetime(2025, 1, 3),
    )
    assert index_range.begin.tzinfo is UTC
    assert index_range.took_ms == 0


def test_negative_duration_rejected():
    with pytest.raises(ValidationError):
        make_range("graylog_0", 0, 10, took_ms=-1)


def test_begin_after_end_is_kept_as_reported():
    index_range = make_range("broken", 500, 100)
    assert index_range.begin > index_range.end


def test_overlaps_is_inclusive():
    index_range = make_range("a", 0, 10)
    assert index_range.overlaps(ms(10), ms(20))
    assert index_range.overlaps(ms(-5), ms(0))
    assert not index_range.overlaps(ms(11), ms(19))


def test_sorted_ranges_orders_by_begin_then_name():
    ranges = [make_range("c", 20, 30), make_range("b", 0, 5), make_range("a", 0, 50)]
    assert [r.index_name for r in sorted_ranges(ranges)] == ["a", "b", "c"]


def test_sorted_ranges_keeps_latest_duplicate():
    old = make_range("a", 0, 10, calculated_ms=1)
    new = make_range("a", 0, 20, calculated_ms=2)
    result = sorted_ranges([new, old])
    assert result == [new]


def test_from_record_round_trip_columns():
    index_range = make_range("graylog_1", 1000, 5000, calculated_ms=9000, took_ms=12)

    class _Row:
        pass

    row = _Row()
    for key, value in index_range.to_columns().items():
        setattr(row, key, value)
    assert row.begin == 1000 and row.end == 5000
    assert IndexRange.from_record(row) == index_range


def test_timestamps_are_kept_to_millisecond_precision():
    index_range = IndexRange(
        index_name="graylog_0",
        begin=datetime(2025, 1, 1, 0, 0, 0, 999999, tzinfo=UTC),
        end=datetime(2025, 1, 2, 0, 0, 0, 1500, tzinfo=UTC),
        calculated_at=datetime(2025, 1, 3, 0, 0, 0, 123456, tzinfo=UTC),
    )
    assert index_range.begin.microsecond == 999000
    assert index_range.end.microsecond == 1000
    assert index_range.calculated_at.microsecond == 123000

"""
Index range repository functions.

Every read excludes rows written by the legacy schema (those carrying a
``start`` column value) and rows with a missing bound; they are never
migrated, only filtered. Stored timestamps are epoch milliseconds, so query
bounds are rounded inwards: ``begin`` up, ``end`` down.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from index_ranges.db import models, schemas
from index_ranges.utils.timestamps import to_millis, to_millis_ceil


def _valid_ranges(db: Session):
    record = models.IndexRangeRecord
    # rows missing a bound cannot be routed against and are skipped like legacy ones
    return db.query(record).filter(
        record.start.is_(None),
        record.begin.isnot(None),
        record.end.isnot(None),
        record.calculated_at.isnot(None),
    )


def get_index_range(db: Session, index_name: str) -> Optional[models.IndexRangeRecord]:
    return (
        _valid_ranges(db)
        .filter(models.IndexRangeRecord.index_name == index_name)
        .order_by(models.IndexRangeRecord.calculated_at.desc())
        .first()
    )


def find_index_ranges(db: Session, begin: datetime, end: datetime) -> List[models.IndexRangeRecord]:
    return (
        _valid_ranges(db)
        .filter(
            models.IndexRangeRecord.begin <= to_millis(end),
            models.IndexRangeRecord.end >= to_millis_ceil(begin),
        )
        .all()
    )


def get_all_index_ranges(db: Session) -> List[models.IndexRangeRecord]:
    return _valid_ranges(db).all()


def save_index_range(db: Session, index_range: schemas.IndexRange) -> models.IndexRangeRecord:
    """Replace whatever is stored for the index with ``index_range``.

    Delete and insert share one transaction, so readers on the same database
    never observe the index without a range.
    """
    try:
        db.query(models.IndexRangeRecord).filter(
            models.IndexRangeRecord.index_name == index_range.index_name
        ).delete(synchronize_session=False)
        db_index_range = models.IndexRangeRecord(**index_range.to_columns())
        db.add(db_index_range)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_index_range)
    return db_index_range


def delete_index_range(db: Session, index_name: str) -> int:
    """Remove every row for ``index_name``; returns the number removed."""
    try:
        deleted = db.query(models.IndexRangeRecord).filter(
            models.IndexRangeRecord.index_name == index_name
        ).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return deleted

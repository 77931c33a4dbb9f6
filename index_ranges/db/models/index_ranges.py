import uuid
from sqlalchemy import BigInteger, Column, Index, Integer, Text, Uuid
from .base import Base


class IndexRangeRecord(Base):
    """Stored timestamp span of one index.

    Timestamps are epoch milliseconds so the overlap query is a pair of
    numeric comparisons. ``start`` only exists on rows written by the old
    schema; every read filters those rows out.
    """
    __tablename__ = 'index_ranges'
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    index_name = Column(Text, nullable=False)
    begin = Column(BigInteger, nullable=True)
    end = Column(BigInteger, nullable=True)
    calculated_at = Column(BigInteger, nullable=True)
    took_ms = Column(Integer, nullable=False, default=0)
    # Legacy schema marker
    start = Column(BigInteger, nullable=True)

    __table_args__ = (
        Index('ix_index_ranges_index_name', 'index_name'),
        Index('ix_index_ranges_begin_end', 'begin', 'end'),
    )

    def __repr__(self):
        return f"<IndexRangeRecord index_name={self.index_name!r} begin={self.begin} end={self.end}>"

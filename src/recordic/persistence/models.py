"""
Single-table schema: every record of every type lives here.
"""

from sqlalchemy import JSON, BigInteger, Column, Index, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

TABLE_NAME = "records"

# JSONB on Postgres, plain JSON elsewhere; Python None is stored as SQL NULL
Payload = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class RecordRow(Base):
    """Single table keyed by the deterministic record id."""

    __tablename__ = TABLE_NAME
    __table_args__ = (
        Index("ix_records_type", "type"),
        Index("ix_records_index", "type", "sid", "ts"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True)
    type = Column(String, nullable=False)
    sid = Column(String, nullable=False)
    oid = Column(String, nullable=True)
    ts = Column(BigInteger, nullable=False)
    data = Column(Payload, nullable=True)

from sqlalchemy import Column, BigInteger, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime, timezone
from models.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class SyncedRecord(Base):
    """
    Records pulled from the upstream source, stored as opaque payloads.

    Design Decisions:
    - id is assigned by the sync job at write time (wall-clock milliseconds);
      upstream records carry no guaranteed stable identifier
    - JSONB keeps the payload untouched and queryable
    """
    __tablename__ = "synced_records"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    payload = Column(JSONB, nullable=False)

    synced_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_synced_at", "synced_at"),
    )

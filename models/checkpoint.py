from sqlalchemy import Column, String, BigInteger, DateTime
from datetime import datetime, timezone
from models.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ControlRecord(Base):
    """
    Key-value control table holding the sync watermark.
    
    Design:
    - One row per well-known identifier ("lastProcessedTimestamp")
    - timestamp is the exclusive upper bound of processed time, in
      milliseconds since epoch
    - Written with last-writer-wins upserts; a single active sync instance
      is assumed
    """
    __tablename__ = "sync_control"
    
    id = Column(String(100), primary_key=True)
    timestamp = Column(BigInteger, nullable=False)
    
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

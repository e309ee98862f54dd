"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (TickStatus, TickState)
    checkpoint: Key-value control table holding the watermark
    synced_record: Opaque records written by the sync job

Usage:
    from models.base import Base, TickStatus
    from models.checkpoint import ControlRecord
    from models.synced_record import SyncedRecord
"""

__all__ = [
    "Base",
    "TickStatus",
    "TickState",
    "ControlRecord",
    "SyncedRecord",
]

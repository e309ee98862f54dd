"""
PostgreSQL-backed checkpoint store and record sink.

Both are key-value writers: every put is an INSERT ... ON CONFLICT DO UPDATE,
so writing an existing key replaces it. Each operation runs in its own
session and commits before returning.
"""

from typing import Dict, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sync_job.base import CheckpointStore, RecordSink
from models.checkpoint import ControlRecord
from models.synced_record import SyncedRecord
from core.exceptions import DatabaseError, PerRecordWriteError
import logging

logger = logging.getLogger(__name__)


class PostgresCheckpointStore(CheckpointStore):
    """Checkpoint items stored as rows of the sync_control table."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def get(self, checkpoint_id: str) -> Optional[Dict[str, Any]]:
        try:
            async with self.session_maker() as session:
                row = await session.get(ControlRecord, checkpoint_id)
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to read checkpoint",
                context={
                    "operation": "SELECT",
                    "table_name": ControlRecord.__tablename__,
                    "checkpoint_id": checkpoint_id
                },
                original_exception=e
            )

        if row is None:
            return None
        return {"timestamp": row.timestamp}

    async def put(self, checkpoint_id: str, item: Dict[str, Any]) -> None:
        stmt = insert(ControlRecord).values(id=checkpoint_id, timestamp=item["timestamp"])
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "timestamp": stmt.excluded.timestamp,
                "updated_at": stmt.excluded.updated_at,
            }
        )

        try:
            async with self.session_maker() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to write checkpoint",
                context={
                    "operation": "UPSERT",
                    "table_name": ControlRecord.__tablename__,
                    "checkpoint_id": checkpoint_id
                },
                original_exception=e
            )


class PostgresRecordSink(RecordSink):
    """
    Write synced records into the synced_records table.

    The payload is stored as-is; the key supplied by the caller becomes the
    primary key, and a repeated key overwrites the earlier payload.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def put(self, key: int, record: Dict[str, Any]) -> None:
        stmt = insert(SyncedRecord).values(id=key, payload=record)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "payload": stmt.excluded.payload,
                "synced_at": stmt.excluded.synced_at,
            }
        )

        try:
            async with self.session_maker() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise PerRecordWriteError(
                "Failed to store record",
                context={
                    "operation": "UPSERT",
                    "table_name": SyncedRecord.__tablename__,
                    "record_key": key
                },
                original_exception=e
            )

        logger.debug(f"Stored record {key}")

"""
Async engine and session factory shared by the sync job, the API and the scripts.

Every checkpoint read/write and every record write opens its own short
session, so connections are pre-pinged: a tick that follows a long idle
interval should not fail on a connection the server already dropped.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from core.config import settings
from models.base import Base
import logging

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    pool_recycle=1800
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def create_tables(bind=None) -> list:
    """Create sync_control and synced_records if missing; returns the table names"""
    # Register models on Base.metadata
    from models.checkpoint import ControlRecord  # noqa: F401
    from models.synced_record import SyncedRecord  # noqa: F401

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    names = sorted(Base.metadata.tables)
    logger.info(f"Tables ready: {', '.join(names)}")
    return names


async def dispose_engine(bind=None):
    """Close pooled connections before the event loop goes away"""
    bind = bind or engine
    await bind.dispose()
    logger.debug("Database engine disposed")

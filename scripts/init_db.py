import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import create_tables, dispose_engine
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def init_database():
    logger.info("Connecting to database...")
    try:
        names = await create_tables()
        logger.info(f"Tables created successfully: {', '.join(names)}")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())

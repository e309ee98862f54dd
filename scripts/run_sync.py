"""
Script to run a single sync tick against the configured source and database
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import async_session_maker, dispose_engine
from core.exceptions import SyncException
from core.logging import setup_logging, describe_tick
from sync_job.scheduler import build_runner

logger = logging.getLogger(__name__)


async def run_sync() -> int:
    """Initialize the watermark if needed, then run one tick"""
    runner = build_runner(async_session_maker)
    
    try:
        await runner.initialize()
        result = await runner.run_tick()
        logger.info(describe_tick(result))
        return 0
    
    except SyncException as e:
        logger.error(f"Sync tick failed: {e}")
        return 1
    
    finally:
        await dispose_engine()


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_sync()))

import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker
from core.config import settings
from core.database import async_session_maker
from core.exceptions import SyncException
from core.logging import describe_tick
from sync_job.runner import SyncRunner
from sync_job.checkpoint import CheckpointManager
from sync_job.extractors.api_fetcher import HTTPRecordFetcher
from sync_job.loaders.postgres_loader import PostgresCheckpointStore, PostgresRecordSink

logger = logging.getLogger(__name__)


def build_runner(session_maker: async_sessionmaker) -> SyncRunner:
    """Wire a SyncRunner to the Postgres stores and the HTTP source"""
    checkpoints = CheckpointManager(PostgresCheckpointStore(session_maker))
    return SyncRunner(
        checkpoints=checkpoints,
        fetcher=HTTPRecordFetcher(),
        sink=PostgresRecordSink(session_maker)
    )


class SyncScheduler:
    """
    Drives SyncRunner.run_tick on a fixed interval.

    Ticks are serialized: the job allows a single running instance and
    coalesces missed runs, so an overrunning tick causes the next one to be
    skipped rather than run alongside it.
    """

    def __init__(self, runner: Optional[SyncRunner] = None):
        self.scheduler = AsyncIOScheduler()
        if runner is None:
            runner = build_runner(async_session_maker)
        self.runner = runner

    async def initialize(self) -> bool:
        """Seed the watermark; failures are logged and retried on the next tick"""
        try:
            await self.runner.initialize()
            return True
        except SyncException as e:
            logger.error(
                f"Error initializing control table: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            return False

    async def run_sync_job(self):
        """Job to run one sync tick"""
        logger.debug("Scheduler: Starting sync tick")
        try:
            result = await self.runner.run_tick()
            logger.info(f"Scheduler: {describe_tick(result)}")
            return result
        except SyncException as e:
            logger.error(
                f"Scheduler: sync tick failed - {e.message}",
                extra={"error_context": e.to_dict()}
            )
        except Exception as e:
            logger.exception(f"Scheduler: sync tick failed unexpectedly - {e}")
        return None

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_sync_job,
            trigger=IntervalTrigger(seconds=settings.SYNC_INTERVAL_SECONDS),
            id="sync_job",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info(f"Sync Scheduler started (every {settings.SYNC_INTERVAL_SECONDS}s)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Sync Scheduler stopped")

"""
Incremental, checkpointed window sync.

Modules:
    base: Abstract collaborators (CheckpointStore, RecordFetcher, RecordSink)
    window: Window value object and next-window computation
    checkpoint: Watermark initialize / read / advance
    runner: Per-tick orchestrator
    scheduler: APScheduler integration driving one tick per interval
        (not imported here; it binds the process-wide database engine)

Subpackages:
    extractors: HTTP record fetcher
    loaders: PostgreSQL checkpoint store and record sink

Usage:
    from core.database import async_session_maker
    from sync_job.scheduler import build_runner

    runner = build_runner(async_session_maker)
    await runner.initialize()
    result = await runner.run_tick()
"""

from sync_job.base import CheckpointStore, RecordFetcher, RecordSink
from sync_job.window import Window, compute_window, format_ms
from sync_job.checkpoint import CheckpointManager
from sync_job.runner import SyncRunner, wall_clock_key
from sync_job.extractors.api_fetcher import HTTPRecordFetcher
from sync_job.loaders.postgres_loader import PostgresCheckpointStore, PostgresRecordSink

__all__ = [
    "CheckpointStore",
    "RecordFetcher",
    "RecordSink",
    "Window",
    "compute_window",
    "format_ms",
    "CheckpointManager",
    "SyncRunner",
    "wall_clock_key",
    "HTTPRecordFetcher",
    "PostgresCheckpointStore",
    "PostgresRecordSink",
]

# ============================================================================
# File: sync_job/runner.py
# Description: Per-tick sync orchestrator
# ============================================================================
"""
Sync Runner - moves one window from the upstream source into the record sink.

Each tick:
1. Schedule - read the watermark and compute the next window (or no-op)
2. Fetch - pull the window's records; a failed fetch counts as an empty batch
3. Write - store records one at a time; individual failures are skipped
4. Commit - advance the watermark to the window's end

Checkpoint store failures abort the tick before the watermark moves, so the
same window is picked up again on the next tick.
"""

import asyncio
import time
from typing import Dict, Any, List, Callable, Optional
import logging

from core.config import settings
from core.exceptions import ExtractionError, SyncException
from models.base import TickState, TickStatus
from sync_job.base import RecordFetcher, RecordSink
from sync_job.checkpoint import CheckpointManager, now_ms
from sync_job.window import Window, compute_window

logger = logging.getLogger(__name__)


def wall_clock_key() -> int:
    """Storage key for a record: wall-clock milliseconds at write time"""
    return int(time.time() * 1000)


class SyncRunner:
    """
    Tick orchestrator.

    Responsibilities:
    - Finish watermark initialization if it has not completed yet
    - Decide whether a window is due
    - Fetch, write and commit that window
    - Never run two ticks at once
    """

    def __init__(
        self,
        checkpoints: CheckpointManager,
        fetcher: RecordFetcher,
        sink: RecordSink,
        window_size: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
        key_factory: Callable[[], int] = wall_clock_key
    ):
        self.checkpoints = checkpoints
        self.fetcher = fetcher
        self.sink = sink
        self.window_size = window_size if window_size is not None else settings.WINDOW_SIZE_MS
        self.clock = clock
        self.key_factory = key_factory

        self.state = TickState.IDLE
        self.initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """
        Seed the watermark once.

        Raises:
            TransientStoreError: initialization did not complete
        """
        await self.checkpoints.initialize()
        self.initialized = True

    async def run_tick(self) -> Dict[str, Any]:
        """
        Run one sync cycle.

        Returns:
            Dictionary with tick statistics:
            - status: "noop", "skipped", "success" or "partial_success"
            - window_start / window_end: Bounds of the processed window
            - watermark_before / watermark_after
            - fetch_failed: Whether the fetch was replaced by an empty batch
            - records_fetched / records_written / records_failed
            - error_details: Per-record failures (if any)

        Raises:
            TransientStoreError: The watermark could not be initialized, read
                or advanced; the stored watermark is unchanged
        """
        if self._lock.locked():
            logger.warning("Previous tick still running, skipping this one")
            return {"status": TickStatus.SKIPPED.value}

        async with self._lock:
            try:
                return await self._run_tick()
            finally:
                self.state = TickState.IDLE

    async def _run_tick(self) -> Dict[str, Any]:
        if not self.initialized:
            await self.initialize()

        # --------------------------------------------------
        # PHASE 1: SCHEDULE
        # --------------------------------------------------
        watermark = await self.checkpoints.read()
        window = compute_window(watermark, self.clock(), self.window_size)

        if window is None:
            logger.info("No new data to process.")
            return {
                "status": TickStatus.NOOP.value,
                "watermark_before": watermark,
                "watermark_after": watermark
            }

        logger.info(f"Fetching data from {window.describe()}")

        # --------------------------------------------------
        # PHASE 2: FETCH
        # --------------------------------------------------
        self.state = TickState.FETCHING
        records, fetch_failed = await self._fetch(window)
        logger.info(f"Fetched {len(records)} records")

        # --------------------------------------------------
        # PHASE 3: WRITE
        # --------------------------------------------------
        self.state = TickState.WRITING
        records_written, duplicate_keys, error_details = await self._write(window, records)
        records_failed = len(error_details)

        # --------------------------------------------------
        # PHASE 4: COMMIT
        # --------------------------------------------------
        self.state = TickState.COMMITTING
        await self.checkpoints.advance(window.end)

        status = TickStatus.SUCCESS if records_failed == 0 else TickStatus.PARTIAL
        result = {
            "status": status.value,
            "window_start": window.start,
            "window_end": window.end,
            "watermark_before": watermark,
            "watermark_after": window.end,
            "fetch_failed": fetch_failed,
            "records_fetched": len(records),
            "records_written": records_written,
            "records_failed": records_failed,
            "duplicate_keys": duplicate_keys
        }

        if error_details:
            result["error_details"] = error_details

        logger.info(
            f"Tick completed: {result['status']} - "
            f"Fetched: {len(records)}, Written: {records_written}, Failed: {records_failed}, "
            f"Duplicate keys: {duplicate_keys}"
        )
        return result

    async def _fetch(self, window: Window):
        """Fetch the window; any failure yields an empty batch."""
        try:
            records = await self.fetcher.fetch(window.start, window.end)
            return list(records or []), False

        except ExtractionError as e:
            logger.error(
                f"Error fetching data from API: {e.message}",
                extra={"error_context": e.to_dict()}
            )

        except Exception as e:
            logger.error(f"Unexpected error fetching data from API: {e}")

        return [], True

    async def _write(self, window: Window, records: List[Dict[str, Any]]):
        """
        Write each record independently.

        Returns (written, duplicate_keys, error_details). A key handed out
        twice in one tick overwrites the earlier row; such writes are logged
        and counted in duplicate_keys.
        """
        written = 0
        duplicate_keys = 0
        stored_keys = set()
        error_details = []

        for index, record in enumerate(records):
            key = self.key_factory()
            try:
                await self.sink.put(key, record)
                written += 1
                logger.debug(f"Data item stored under {key}")

                if key in stored_keys:
                    duplicate_keys += 1
                    logger.warning(
                        f"Record {index} of window {window.start} reused key {key}; "
                        f"an earlier record from this tick was overwritten"
                    )
                stored_keys.add(key)

            except Exception as e:
                error_detail = {
                    "phase": "write",
                    "index": index,
                    "record_key": key,
                    "window_start": window.start,
                    "window_end": window.end,
                    "error_type": type(e).__name__,
                    "error_message": e.message if isinstance(e, SyncException) else str(e)
                }
                error_details.append(error_detail)

                logger.error(
                    f"Error storing record {index} of window {window.start}: {error_detail['error_message']}",
                    extra={"error_context": error_detail}
                )

        return written, duplicate_keys, error_details

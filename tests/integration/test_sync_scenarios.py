# ============================================================================
# File: tests/integration/test_sync_scenarios.py
# ============================================================================

import itertools
import pytest

from sync_job.checkpoint import CheckpointManager
from sync_job.runner import SyncRunner
from sync_job.scheduler import SyncScheduler
from core.exceptions import TransientFetchError
from conftest import (
    EPOCH0,
    WINDOW,
    CHECKPOINT_ID,
    FakeClock,
    FakeFetcher,
    FakeSink,
    InMemoryCheckpointStore,
)


def build(store, fetcher, sink, clock):
    checkpoints = CheckpointManager(
        store,
        checkpoint_id=CHECKPOINT_ID,
        bootstrap_epoch=EPOCH0,
        window_size=WINDOW,
        clock=clock
    )
    runner = SyncRunner(
        checkpoints=checkpoints,
        fetcher=fetcher,
        sink=sink,
        window_size=WINDOW,
        clock=clock,
        key_factory=itertools.count(1).__next__
    )
    return SyncScheduler(runner=runner)


@pytest.mark.asyncio
async def test_catch_up_covers_every_window_once():
    """
    Starting from the bootstrap watermark with the clock well ahead, repeated
    ticks walk forward one contiguous window at a time, then go idle.
    """
    store = InMemoryCheckpointStore()
    fetcher = FakeFetcher()
    clock = FakeClock(EPOCH0 + 3 * WINDOW)
    scheduler = build(store, fetcher, FakeSink(), clock)

    assert await scheduler.initialize() is True

    results = []
    for _ in range(10):
        results.append(await scheduler.run_sync_job())

    windows = fetcher.calls
    assert windows[0] == (EPOCH0 - WINDOW + 1, EPOCH0 + 1)
    for previous, current in zip(windows, windows[1:]):
        assert current[0] == previous[1] + 1
        assert current[1] - current[0] == WINDOW

    assert results[-1]["status"] == "noop"
    assert store.watermark() >= clock.now
    assert len(store.writes) == len(windows) + 1


@pytest.mark.asyncio
async def test_outage_then_recovery(mock_api_data):
    """
    Source outage windows are committed as empty, a checkpoint outage
    leaves the watermark alone, and the next healthy tick redoes that window.
    """
    store = InMemoryCheckpointStore()
    fetcher = FakeFetcher(mock_api_data)
    sink = FakeSink(fail_on={2})
    clock = FakeClock(EPOCH0 + 10 * WINDOW)
    scheduler = build(store, fetcher, sink, clock)
    await scheduler.initialize()

    # Tick 1: record 2 of 3 rejected, window still committed
    first = await scheduler.run_sync_job()
    assert first["status"] == "partial_success"
    assert len(sink.attempts) == 3
    assert store.watermark() == first["window_end"]

    # Tick 2: upstream down, empty batch, watermark still advances
    fetcher.error = TransientFetchError("Network error after 3 attempts")
    second = await scheduler.run_sync_job()
    assert second["fetch_failed"] is True
    assert second["window_start"] == first["window_end"] + 1
    assert store.watermark() == second["window_end"]

    # Tick 3: checkpoint store refuses the commit
    fetcher.error = None
    store.fail_put = True
    assert await scheduler.run_sync_job() is None
    assert store.watermark() == second["window_end"]
    failed_window = fetcher.calls[-1]

    # Tick 4: same window again, records written a second time
    store.fail_put = False
    fourth = await scheduler.run_sync_job()
    assert fetcher.calls[-1] == failed_window
    assert fourth["window_start"] == second["window_end"] + 1
    assert len(sink.attempts) == 9
    assert store.watermark() == fourth["window_end"]


@pytest.mark.asyncio
async def test_existing_watermark_survives_restart():
    """A second process start must not reset a watermark that has moved on"""
    store = InMemoryCheckpointStore()
    clock = FakeClock(EPOCH0 + 5 * WINDOW)

    first_process = build(store, FakeFetcher(), FakeSink(), clock)
    await first_process.initialize()
    await first_process.run_sync_job()
    await first_process.run_sync_job()
    watermark = store.watermark()

    second_process = build(store, FakeFetcher(), FakeSink(), clock)
    assert await second_process.initialize() is True
    assert store.watermark() == watermark

    result = await second_process.run_sync_job()
    assert result["watermark_before"] == watermark

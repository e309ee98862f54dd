"""
Pytest configuration and fixtures
"""

import itertools
import pytest
from typing import Any, Dict, List, Optional

from sync_job.base import CheckpointStore, RecordFetcher, RecordSink
from sync_job.checkpoint import CheckpointManager
from sync_job.runner import SyncRunner

EPOCH0 = 1704119008828  # 2024-01-01T14:23:28.828Z
WINDOW = 60000
CHECKPOINT_ID = "lastProcessedTimestamp"


class FakeClock:
    """Settable clock returning epoch milliseconds"""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now


class InMemoryCheckpointStore(CheckpointStore):
    """Dict-backed checkpoint store that can be told to fail"""

    def __init__(self, items: Optional[Dict[str, Dict[str, Any]]] = None):
        self.items = {k: dict(v) for k, v in (items or {}).items()}
        self.writes: List[Dict[str, Any]] = []
        self.fail_get = False
        self.fail_put = False

    async def get(self, checkpoint_id: str) -> Optional[Dict[str, Any]]:
        if self.fail_get:
            raise ConnectionError("checkpoint store unavailable")
        item = self.items.get(checkpoint_id)
        return dict(item) if item is not None else None

    async def put(self, checkpoint_id: str, item: Dict[str, Any]) -> None:
        if self.fail_put:
            raise ConnectionError("checkpoint store unavailable")
        self.items[checkpoint_id] = dict(item)
        self.writes.append({"id": checkpoint_id, **item})

    def watermark(self) -> Optional[int]:
        item = self.items.get(CHECKPOINT_ID)
        return item["timestamp"] if item else None


class FakeFetcher(RecordFetcher):
    """Returns canned records, or raises ``error`` when set"""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self.records = list(records or [])
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def fetch(self, start: int, end: int) -> List[Dict[str, Any]]:
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeSink(RecordSink):
    """Collects written records; fails on the attempt numbers in ``fail_on``"""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.attempts: List[tuple] = []
        self.stored: Dict[int, Dict[str, Any]] = {}

    async def put(self, key: int, record: Dict[str, Any]) -> None:
        self.attempts.append((key, record))
        if len(self.attempts) in self.fail_on:
            raise IOError(f"write rejected for {key}")
        self.stored[key] = record


@pytest.fixture
def clock():
    return FakeClock(EPOCH0 + 30000)


@pytest.fixture
def checkpoint_store():
    return InMemoryCheckpointStore()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def checkpoint_manager(checkpoint_store, clock):
    return CheckpointManager(
        checkpoint_store,
        checkpoint_id=CHECKPOINT_ID,
        bootstrap_epoch=EPOCH0,
        window_size=WINDOW,
        clock=clock
    )


@pytest.fixture
def runner(checkpoint_manager, fetcher, sink, clock):
    return SyncRunner(
        checkpoints=checkpoint_manager,
        fetcher=fetcher,
        sink=sink,
        window_size=WINDOW,
        clock=clock,
        key_factory=itertools.count(1).__next__
    )


@pytest.fixture
def mock_api_data():
    """Records as the date-range API returns them"""
    return [
        {
            "uri": "doc://alpha",
            "title": "Alpha",
            "createdAt": "2024-01-01T14:22:40.000Z"
        },
        {
            "uri": "doc://beta",
            "title": "Beta",
            "createdAt": "2024-01-01T14:22:55.500Z"
        },
        {
            "uri": "doc://gamma",
            "title": "Gamma",
            "createdAt": "2024-01-01T14:23:20.000Z"
        }
    ]

"""
Watermark lifecycle: initialize, read and advance.

The watermark is the exclusive upper bound of already-processed time, in
milliseconds since epoch. It lives in the checkpoint store under a single
well-known identifier and is loaded fresh on every tick.
"""

import logging
import time
from typing import Callable, Optional

from core.config import settings
from core.exceptions import TransientStoreError
from sync_job.base import CheckpointStore
from sync_job.window import format_ms

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in milliseconds since epoch"""
    return int(time.time() * 1000)


class CheckpointManager:
    """
    Owns the watermark stored in a CheckpointStore.

    Responsibilities:
    - Seed the watermark once (idempotent initialization)
    - Read the watermark for scheduling, with a non-persisted fallback
    - Persist an advanced watermark (last-writer-wins)
    """

    def __init__(
        self,
        store: CheckpointStore,
        checkpoint_id: Optional[str] = None,
        bootstrap_epoch: Optional[int] = None,
        window_size: Optional[int] = None,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store
        self.checkpoint_id = checkpoint_id or settings.CHECKPOINT_ID
        self.bootstrap_epoch = bootstrap_epoch if bootstrap_epoch is not None else settings.BOOTSTRAP_EPOCH_MS
        self.window_size = window_size if window_size is not None else settings.WINDOW_SIZE_MS
        self.clock = clock

    @property
    def initial_watermark(self) -> int:
        return self.bootstrap_epoch - self.window_size

    async def initialize(self) -> bool:
        """
        Seed the watermark if the store has none.

        Returns:
            True if a value was written, False if one was already present

        Raises:
            TransientStoreError: the store could not be read or written;
                initialization has not completed and should be retried
        """
        item = await self._get("initialize")
        if item is not None:
            logger.debug(f"Watermark already present: {item.get('timestamp')}")
            return False

        initial = self.initial_watermark
        await self._put(initial, "initialize")
        logger.info(f"Initialized control table with timestamp: {initial}")
        return True

    async def read(self) -> int:
        """
        Return the current watermark.

        When no watermark exists, ``now - window_size`` is returned so that
        scheduling can go on. That value is never written back.

        Raises:
            TransientStoreError: the store could not be read
        """
        stored = await self.stored_watermark()
        if stored is None:
            fallback = self.clock() - self.window_size
            logger.warning(
                f"No watermark stored under '{self.checkpoint_id}', "
                f"scheduling from {fallback} without persisting it"
            )
            return fallback
        return stored

    async def stored_watermark(self) -> Optional[int]:
        """Return the persisted watermark, or None if nothing is stored"""
        item = await self._get("read")
        if item is None or item.get("timestamp") is None:
            return None
        return int(item["timestamp"])

    async def advance(self, new_watermark: int) -> None:
        """
        Persist ``new_watermark`` unconditionally.

        Raises:
            TransientStoreError: the write failed; the stored watermark is
                unchanged and the next tick reprocesses from it
        """
        await self._put(new_watermark, "advance")
        logger.info(
            f"Updated last processed timestamp to: {new_watermark} -- {format_ms(new_watermark)}"
        )

    async def _get(self, operation: str):
        try:
            return await self.store.get(self.checkpoint_id)
        except Exception as e:
            raise TransientStoreError(
                "Failed to read watermark",
                context={
                    "checkpoint_id": self.checkpoint_id,
                    "operation": operation
                },
                original_exception=e
            )

    async def _put(self, value: int, operation: str) -> None:
        try:
            await self.store.put(self.checkpoint_id, {"timestamp": value})
        except Exception as e:
            raise TransientStoreError(
                "Failed to write watermark",
                context={
                    "checkpoint_id": self.checkpoint_id,
                    "checkpoint_value": value,
                    "operation": operation
                },
                original_exception=e
            )

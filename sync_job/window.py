"""
Window computation.

Windows are fixed-size ranges of epoch milliseconds that follow directly on
from the watermark. Both bounds are inclusive when handed to the fetcher.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class Window:
    start: int
    end: int

    def describe(self) -> str:
        return f"{format_ms(self.start)} -> {format_ms(self.end)}"


def format_ms(value: int) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string."""
    seconds, millis = divmod(value, 1000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)
    return moment.isoformat(timespec="milliseconds")


def compute_window(watermark: int, now: int, window_size: int) -> Optional[Window]:
    """
    Return the next window to process, or None when nothing is due.

    A window is due as soon as the watermark is behind ``now``. Its end may
    lie in the future; the window is still processed whole rather than being
    cut at ``now``.
    """
    if watermark >= now:
        return None
    start = watermark + 1
    return Window(start=start, end=start + window_size)

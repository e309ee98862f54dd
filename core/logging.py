"""
Logging configuration
"""

import logging
import sys
from typing import Any, Dict, Optional
from core.config import settings

# Libraries that log every query, job run or request at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "apscheduler", "httpx")


def setup_logging(level: Optional[str] = None) -> int:
    """Configure application logging; returns the numeric level applied"""
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Library chatter only shows up when the job itself is at DEBUG
    quiet_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.getLogger(__name__).info(
        f"Logging configured at {logging.getLevelName(log_level)} level "
        f"(checkpoint={settings.CHECKPOINT_ID}, window={settings.WINDOW_SIZE_MS}ms)"
    )
    return log_level


def describe_tick(result: Optional[Dict[str, Any]]) -> str:
    """One-line summary of a tick result for log output"""
    if not result:
        return "tick failed"

    status = result.get("status")
    if status == "skipped":
        return "tick skipped: previous tick still running"
    if status == "noop":
        return f"tick noop: watermark {result.get('watermark_after')} is current"

    summary = (
        f"tick {status}: window [{result.get('window_start')}, {result.get('window_end')}], "
        f"fetched={result.get('records_fetched', 0)}, "
        f"written={result.get('records_written', 0)}, "
        f"failed={result.get('records_failed', 0)}"
    )
    if result.get("duplicate_keys"):
        summary += f", duplicate_keys={result['duplicate_keys']}"
    if result.get("fetch_failed"):
        summary += ", fetch failed"
    return summary

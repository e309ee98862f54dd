"""
Core utilities and configuration for the window sync job.

This package provides foundational components used throughout the sync job:

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factory (imported on demand; it
        creates the engine)
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import TransientStoreError, TransientFetchError
    from core.logging import setup_logging
"""

from core.config import settings
from core.logging import setup_logging, describe_tick
from core.exceptions import (
    SyncException,
    RetryableError,
    NonRetryableError,
    ExtractionError,
    TransientFetchError,
    RateLimitError,
    AuthenticationError,
    ResourceNotFoundError,
    DataFormatError,
    LoadError,
    DatabaseError,
    PerRecordWriteError,
    CheckpointError,
    TransientStoreError,
)

__all__ = [
    "settings",
    "setup_logging",
    "describe_tick",
    # Exceptions
    "SyncException",
    "RetryableError",
    "NonRetryableError",
    "ExtractionError",
    "TransientFetchError",
    "RateLimitError",
    "AuthenticationError",
    "ResourceNotFoundError",
    "DataFormatError",
    "LoadError",
    "DatabaseError",
    "PerRecordWriteError",
    "CheckpointError",
    "TransientStoreError",
]

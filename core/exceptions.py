"""
Custom exceptions for the window sync job with structured error context.

Every failure the sync job can hit is one of these. None of them is fatal:
the scheduler catches them at the tick boundary, logs them, and carries on
with the next tick.

Exception Hierarchy:
    SyncException (base)
    ├── ExtractionError
    │   ├── TransientFetchError
    │   │   └── RateLimitError
    │   ├── AuthenticationError
    │   ├── ResourceNotFoundError
    │   └── DataFormatError
    ├── LoadError
    │   ├── DatabaseError
    │   └── PerRecordWriteError
    ├── CheckpointError
    │   └── TransientStoreError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class SyncException(Exception):
    """
    Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (window bounds, keys, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(SyncException):
    """
    Mixin for errors that are expected to clear up on their own.

    Use this for transient errors like:
    - Network timeouts
    - Rate limiting (HTTP 429)
    - Checkpoint store outages
    - Service unavailable (HTTP 503)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0
    ):
        super().__init__(message, context, original_exception)
        self.max_retries = max_retries
        self.retry_delay = retry_delay


class NonRetryableError(SyncException):
    """
    Mixin for errors that retrying the same request will not fix.

    Use this for permanent errors like:
    - Authentication failures (HTTP 401, 403)
    - Resource not found (HTTP 404)
    - Malformed response bodies
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(SyncException):
    """
    Base exception for failures fetching a window from the upstream source.

    Context should include:
        - api_url: The API endpoint that failed
        - window_start / window_end: Bounds that were requested
        - status_code: HTTP status code (if applicable)
    """
    pass


class TransientFetchError(RetryableError, ExtractionError):
    """Timeouts, connection failures and 5xx responses from the source."""
    pass


class RateLimitError(TransientFetchError):
    """Rate limiting errors (HTTP 429) that should be retried with backoff."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after


class AuthenticationError(NonRetryableError, ExtractionError):
    """Authentication failures (HTTP 401, 403) that should not be retried."""
    pass


class ResourceNotFoundError(NonRetryableError, ExtractionError):
    """Resource not found errors (HTTP 404) that should not be retried."""
    pass


class DataFormatError(NonRetryableError, ExtractionError):
    """The source answered with a body that is not a list of records."""
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(SyncException):
    """Base exception for write failures against a durable store."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when a database operation fails.

    Context should include:
        - operation: Type of database operation (SELECT, UPSERT)
        - table_name: Name of the table
    """
    pass


class PerRecordWriteError(LoadError):
    """
    A single record could not be written to the record sink.

    Context should include:
        - record_key: Storage key assigned to the record
        - window_start / window_end: Window the record belongs to
    """
    pass


# ============================================================================
# Checkpoint Errors
# ============================================================================

class CheckpointError(SyncException):
    """
    Exception raised when watermark management fails.

    Context should include:
        - checkpoint_id: Identifier of the watermark record
        - checkpoint_value: The watermark value involved (if any)
        - operation: Operation that failed (read, initialize, advance)
    """
    pass


class TransientStoreError(RetryableError, CheckpointError):
    """
    The checkpoint store could not be read or written.

    The operation is retried on the next tick from the last watermark that
    was successfully persisted.
    """
    pass

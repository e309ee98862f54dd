"""
HTTP record fetcher with retry logic.

This module fetches one window of records from the upstream date-range API:
- Bounds sent as numeric-string query parameters (startDate, endDate)
- Exponential backoff retry for timeouts, network errors, 429 and 5xx
- Immediate failure for authentication and not-found responses
- Every failure surfaced as an ExtractionError subclass
"""

import httpx
import asyncio
import math
from typing import List, Dict, Any, Optional
from sync_job.base import RecordFetcher
from core.config import settings
from core.exceptions import (
    ExtractionError,
    TransientFetchError,
    RateLimitError,
    AuthenticationError,
    ResourceNotFoundError,
    DataFormatError
)
import logging

logger = logging.getLogger(__name__)


class HTTPRecordFetcher(RecordFetcher):
    """
    Fetch records created within a time window from a REST endpoint.

    Attributes:
        api_url: Date-range endpoint (default: settings.SOURCE_API_URL)
        max_retries: Maximum number of attempts per window (default: 3)
        max_retry_after: Ceiling on a server-sent Retry-After, in seconds (default: 30.0)
        retry_delay: Initial retry delay in seconds (default: 1.0)
        timeout: Request timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        max_retry_after: Optional[float] = None
    ):
        self.api_url = api_url or settings.SOURCE_API_URL
        self.max_retries = max_retries if max_retries is not None else settings.FETCH_MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else settings.FETCH_RETRY_DELAY_SECONDS
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.max_retry_after = (
            max_retry_after if max_retry_after is not None else settings.FETCH_MAX_RETRY_AFTER_SECONDS
        )

    async def _make_request_with_retry(
        self,
        client: httpx.AsyncClient,
        params: Dict[str, str]
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic and exponential backoff.

        Raises:
            AuthenticationError: On HTTP 401/403
            ResourceNotFoundError: On HTTP 404
            RateLimitError: Still rate limited after max retries
            TransientFetchError: Timeouts, network or server errors after max retries
        """
        context = {
            "api_url": self.api_url,
            "window_start": params["startDate"],
            "window_end": params["endDate"]
        }

        for attempt in range(self.max_retries):
            is_last = attempt >= self.max_retries - 1
            delay = self.retry_delay * (2 ** attempt)

            try:
                logger.debug(f"Request attempt {attempt + 1}/{self.max_retries} to {self.api_url}")
                response = await client.get(self.api_url, params=params, timeout=self.timeout)

            except httpx.TimeoutException as e:
                if is_last:
                    raise TransientFetchError(
                        f"Request timeout after {self.max_retries} attempts",
                        context={**context, "timeout": self.timeout, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Request timeout. Retrying in {delay} seconds")
                await asyncio.sleep(delay)
                continue

            except httpx.TransportError as e:
                if is_last:
                    raise TransientFetchError(
                        f"Network error after {self.max_retries} attempts",
                        context={**context, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Network error. Retrying in {delay} seconds: {e}")
                await asyncio.sleep(delay)
                continue

            status_code = response.status_code

            if status_code in (401, 403):
                raise AuthenticationError(
                    f"Authentication failed for {self.api_url}",
                    context={**context, "status_code": status_code}
                )

            if status_code == 404:
                raise ResourceNotFoundError(
                    f"Resource not found: {self.api_url}",
                    context={**context, "status_code": status_code}
                )

            if status_code == 429:
                retry_after = _parse_retry_after(
                    response.headers.get("Retry-After"), delay, self.max_retry_after
                )
                if is_last:
                    raise RateLimitError(
                        f"Rate limit exceeded for {self.api_url}",
                        context={**context, "status_code": status_code, "retry_count": attempt + 1},
                        retry_after=retry_after
                    )
                logger.warning(f"Rate limited. Retrying after {retry_after} seconds")
                await asyncio.sleep(retry_after)
                continue

            if status_code >= 500:
                if is_last:
                    raise TransientFetchError(
                        f"Server error after {self.max_retries} attempts",
                        context={
                            **context,
                            "status_code": status_code,
                            "retry_count": attempt + 1,
                            "response_body": response.text[:500]
                        }
                    )
                logger.warning(
                    f"Server error {status_code}. "
                    f"Retrying in {delay} seconds (attempt {attempt + 1}/{self.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ExtractionError(
                    f"Unexpected HTTP status {status_code}",
                    context={**context, "status_code": status_code},
                    original_exception=e
                )
            return response

        raise TransientFetchError("Max retries exceeded", context=context)

    async def fetch(self, start: int, end: int) -> List[Dict[str, Any]]:
        """
        Fetch every record created in ``[start, end]``.

        Args:
            start: Inclusive lower bound, milliseconds since epoch
            end: Inclusive upper bound, milliseconds since epoch

        Returns:
            List of records as returned by the source

        Raises:
            ExtractionError: Any failure talking to the source
        """
        params = {
            "startDate": str(start),
            "endDate": str(end)
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await self._make_request_with_retry(client, params)

                try:
                    data = response.json()
                except Exception as e:
                    raise DataFormatError(
                        "Failed to parse JSON response",
                        context={
                            "api_url": self.api_url,
                            "response_body": response.text[:500]
                        },
                        original_exception=e
                    )

        except ExtractionError:
            raise

        except Exception as e:
            raise ExtractionError(
                "Unexpected error during window fetch",
                context={
                    "api_url": self.api_url,
                    "window_start": start,
                    "window_end": end
                },
                original_exception=e
            )

        if isinstance(data, dict):
            data = data.get("data")

        if not isinstance(data, list):
            raise DataFormatError(
                "Expected a list of records",
                context={
                    "api_url": self.api_url,
                    "payload_type": type(data).__name__
                }
            )

        logger.info(f"Fetched {len(data)} records for window [{start}, {end}]")
        return data


def _parse_retry_after(value: Optional[str], default: float, ceiling: float) -> float:
    """Seconds to wait before retrying a 429, clamped to [0, ceiling]"""
    seconds = default
    if value is not None:
        try:
            seconds = float(value)
        except ValueError:
            pass
    if not math.isfinite(seconds):
        seconds = ceiling
    return min(max(seconds, 0.0), ceiling)

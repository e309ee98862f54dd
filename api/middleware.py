# ============================================================================
# File: api/middleware.py
# ============================================================================

import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Manual ticks slower than this are logged at WARNING
SLOW_REQUEST_MS = 5000


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Injects:
    - X-Request-ID, also available to handlers as request.state.request_id
    - X-API-Latency-ms
    - X-Tick-Status, when the handler ran a sync tick and set request.state.tick_status
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start_time = time.perf_counter()

        request.state.request_id = request_id

        response: Response = await call_next(request)

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-API-Latency-ms"] = str(latency_ms)

        tick_status = getattr(request.state, "tick_status", None)
        if tick_status is not None:
            response.headers["X-Tick-Status"] = tick_status

        log = logger.warning if latency_ms >= SLOW_REQUEST_MS else logger.debug
        log(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({latency_ms} ms, request_id={request_id}, tick={tick_status or '-'})"
        )
        return response

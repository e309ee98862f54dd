"""
Health check endpoint with checkpoint store status
"""

from fastapi import APIRouter, Depends
from api.dependencies import get_runner, scheduler
from schemas.api import HealthCheckResponse
from sync_job.runner import SyncRunner
from sync_job.window import format_ms
from core.exceptions import SyncException
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(runner: SyncRunner = Depends(get_runner)):
    """
    Health check endpoint.
    
    Returns:
    - Checkpoint store connectivity
    - Stored watermark (if any)
    - Whether the tick scheduler is running
    """
    store_connected = False
    watermark = None
    
    try:
        watermark = await runner.checkpoints.stored_watermark()
        store_connected = True
    except SyncException as e:
        logger.error(
            f"Checkpoint store connection test failed: {e.message}",
            extra={"error_context": e.to_dict()}
        )
    
    return HealthCheckResponse(
        store_connected=store_connected,
        initialized=runner.initialized,
        watermark=watermark,
        watermark_iso=format_ms(watermark) if watermark is not None else None,
        window_size_ms=runner.window_size,
        scheduler_running=scheduler.scheduler.running
    )

"""
On-demand sync tick endpoint
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from api.dependencies import get_runner
from schemas.api import TickResultResponse, ErrorResponse
from sync_job.runner import SyncRunner
from core.exceptions import SyncException
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post(
    "/run",
    response_model=TickResultResponse,
    responses={503: {"model": ErrorResponse}}
)
async def run_sync_tick(request: Request, runner: SyncRunner = Depends(get_runner)):
    """
    Run one sync tick now.
    
    The tick shares the scheduler's runner, so it is skipped if a scheduled
    tick is already in flight. Checkpoint store failures return 503 and leave
    the watermark where it was.
    """
    request_id = getattr(request.state, "request_id", None)
    
    try:
        result = await runner.run_tick()
    except SyncException as e:
        request.state.tick_status = "failed"
        logger.error(
            f"Manual sync tick failed: {e.message}",
            extra={"error_context": e.to_dict()}
        )
        error = ErrorResponse(
            request_id=request_id,
            error_type=type(e).__name__,
            message=e.message,
            context={k: str(v) for k, v in e.context.items()}
        )
        return JSONResponse(status_code=503, content=error.model_dump())
    
    request.state.tick_status = result["status"]
    return TickResultResponse(request_id=request_id, **result)

"""
Pydantic schemas for API responses
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from models.base import TickStatus


def _utcnow():
    return datetime.now(timezone.utc)


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall status: healthy, degraded")
    timestamp: datetime = Field(default_factory=_utcnow)
    store_connected: bool
    initialized: bool = False
    watermark: Optional[int] = Field(None, description="Stored watermark, epoch milliseconds")
    watermark_iso: Optional[str] = None
    window_size_ms: int
    scheduler_running: bool = False
    
    @model_validator(mode="after")
    def determine_status(self):
        """Degraded when the checkpoint store cannot be reached"""
        self.status = "healthy" if self.store_connected else "degraded"
        return self
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "store_connected": True,
                "initialized": True,
                "watermark": 1704119068829,
                "watermark_iso": "2024-01-01T14:24:28.829+00:00",
                "window_size_ms": 60000,
                "scheduler_running": True
            }
        }
    }


# ============================================================================
# Sync Schemas
# ============================================================================

class TickResultResponse(BaseModel):
    """Outcome of a tick triggered through the API"""
    request_id: Optional[str] = None
    status: TickStatus
    window_start: Optional[int] = None
    window_end: Optional[int] = None
    watermark_before: Optional[int] = None
    watermark_after: Optional[int] = None
    fetch_failed: bool = False
    records_fetched: int = 0
    records_written: int = 0
    records_failed: int = 0
    duplicate_keys: int = 0
    error_details: List[Dict[str, Any]] = Field(default_factory=list)
    
    model_config = {"use_enum_values": True}


class ErrorResponse(BaseModel):
    """Error payload for failed ticks"""
    request_id: Optional[str] = None
    error_type: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)

"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, sync
from api.middleware import RequestContextMiddleware
from api.dependencies import scheduler
from core.config import settings
from core.logging import setup_logging
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Window Sync Service",
    description="Incremental, checkpointed sync of time-windowed records",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(sync.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Window Sync Service")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Source: {settings.SOURCE_API_URL}")
    
    await scheduler.initialize()
    
    if settings.SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Window Sync Service")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "hello",
        "service": "Window Sync Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "run_tick": "/sync/run"
        }
    }

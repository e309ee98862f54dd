"""
Pydantic schemas for API responses.

Modules:
    api: Health check and tick result response models
"""

__all__ = [
    "HealthCheckResponse",
    "TickResultResponse",
    "ErrorResponse",
]

"""
MoveMate Backend — Shared Response Schemas
===========================================

What:  Error envelope used by every exception handler, and the health
       check body.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Region GYEONGGI is outside your service regions",
            "details": {"region": "GYEONGGI"},
            "request_id": "a1b2c3d4"
        }

    `stack` is only populated when ENVIRONMENT=development.
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    stack: Optional[str] = Field(default=None, description="Stack trace (development only)")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")

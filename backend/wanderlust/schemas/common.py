"""
Wanderlust Backend - Shared Response Schemas
==============================================

What:  Error and health-check response models used across all routers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "Invalid request data. Missing or invalid fields: destination",
            "missingFields": ["destination"],
            "path": "/api/itinerary",
            "request_id": "a1b2c3d4"
        }
    """

    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    missingFields: Optional[List[str]] = Field(
        default=None,
        description="Every missing or invalid field (validation errors only)",
    )
    path: Optional[str] = Field(default=None, description="Request path")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="'up' when the database answers, 'degraded' otherwise")
    message: str
    time: datetime
    version: str
    database: str = Field(description="connected or disconnected")

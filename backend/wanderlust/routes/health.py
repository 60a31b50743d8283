"""
Wanderlust Backend - Health Check Route
=========================================

What:  GET /api/health (and /health) for the mobile client's reachability
       check and for container probes.
How:   Runs `SELECT 1` against the engine on `app.state`.
       Database answers → 200 {"status": "up"}; otherwise 503 "degraded".
Access: Public.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from wanderlust import __version__
from wanderlust.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/api/health", response_model=HealthResponse, summary="Service health check")
@router.get("/health", response_model=HealthResponse, include_in_schema=False)
async def health_check(request: Request) -> JSONResponse:
    database = "connected"
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        database = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    up = database == "connected"
    health = HealthResponse(
        status="up" if up else "degraded",
        message="Wanderlust Backend Reachable",
        time=datetime.now(timezone.utc),
        version=__version__,
        database=database,
    )
    return JSONResponse(status_code=200 if up else 503, content=health.model_dump(mode="json"))

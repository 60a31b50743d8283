"""
Wanderlust Backend - Search Log Route
=======================================

What:  POST /api/search stores a user's planner question.
Access: Bearer token required.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.database import get_db_session
from wanderlust.dependencies import get_search_service
from wanderlust.middleware.auth import get_current_user
from wanderlust.schemas.auth import TokenClaims
from wanderlust.schemas.common import ErrorResponse
from wanderlust.services.search_service import SearchService

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.post(
    "",
    status_code=201,
    responses={
        201: {"description": "The stored search document"},
        400: {"description": "Missing userEmail or question", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Record a search question",
)
async def record_search(
    body: Dict[str, Any] = Body(...),
    user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    searches: SearchService = Depends(get_search_service),
) -> JSONResponse:
    document = await searches.record(db, body, authenticated_email=user.email)
    return JSONResponse(status_code=201, content=document)

"""
Wanderlust Backend - Itinerary Route Handlers
===============================================

What:  POST /api/itinerary (save an AI-generated plan) and
       GET /api/itinerary/{email} (trip history, newest first).
Access: Bearer token required (enforced by the Request Gate middleware).
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.database import get_db_session
from wanderlust.dependencies import get_itinerary_service
from wanderlust.middleware.auth import get_current_user
from wanderlust.schemas.auth import TokenClaims
from wanderlust.schemas.common import ErrorResponse
from wanderlust.schemas.itinerary import SaveTripResponse
from wanderlust.services.itinerary_service import ItineraryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/itinerary", tags=["Itinerary"])


@router.post(
    "",
    status_code=201,
    response_model=SaveTripResponse,
    responses={
        400: {"description": "Missing or invalid fields (all of them listed)", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Save an AI-generated travel plan",
)
async def save_itinerary(
    body: Dict[str, Any] = Body(...),
    user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    itineraries: ItineraryService = Depends(get_itinerary_service),
) -> SaveTripResponse:
    trip_id = await itineraries.submit(db, body, authenticated_email=user.email)
    return SaveTripResponse(tripId=trip_id)


@router.get(
    "/{email}",
    responses={
        200: {"description": "Saved itineraries, newest first"},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="List a user's saved itineraries",
)
async def get_history(
    email: str,
    user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    itineraries: ItineraryService = Depends(get_itinerary_service),
) -> JSONResponse:
    if email != user.email:
        logger.info("[GET HISTORY] %s requested history of %s", user.email, email)
    history = await itineraries.history(db, email)
    return JSONResponse(content=history.items)

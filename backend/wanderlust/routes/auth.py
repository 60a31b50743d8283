"""
Wanderlust Backend - Auth Route Handlers
==========================================

What:  POST /api/auth/signup and POST /api/auth/login.
How:   Thin handlers: parse the body, delegate to AuthService, return JSON.
       Failures are raised as typed exceptions and formatted by the global
       handlers in main.py (400 for credential problems, 500 for storage).
Access: Public (listed in the Request Gate's public prefixes).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.database import get_db_session
from wanderlust.dependencies import get_auth_service
from wanderlust.schemas.auth import AuthResponse, LoginRequest, SignupRequest
from wanderlust.schemas.common import ErrorResponse
from wanderlust.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/signup",
    status_code=201,
    response_model=AuthResponse,
    responses={
        400: {"description": "Account already exists or invalid body", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Register a new user (or set the first password of a legacy account)",
)
async def signup(
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return await auth.signup(db, email=payload.email, password=payload.password, name=payload.name)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Invalid credentials or legacy account", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Authenticate and receive a bearer token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return await auth.login(db, email=payload.email, password=payload.password)

"""
Wanderlust Backend - Request Gate (Bearer Token Middleware)
=============================================================

What:  Authenticates every non-public request before it reaches a route.
How:   Reads `Authorization: Bearer <token>`, verifies it with the
       TokenService on `app.state`, and attaches the decoded TokenClaims to
       `request.state.user`.

Outcomes:
    public path or OPTIONS preflight  → passed through untouched
    header missing / not "Bearer ..." → 401 "No token provided"
    token fails verification          → 401 "Invalid or expired token"
    valid token                       → request.state.user = TokenClaims

Both failures use status 401; the body message differs only to help a
developer debugging the client.
"""

import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from wanderlust.exceptions import InvalidTokenError, UnauthenticatedError
from wanderlust.responses import error_response
from wanderlust.schemas.auth import TokenClaims

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

PUBLIC_PATHS = {"/health", "/api/health", "/docs", "/redoc", "/openapi.json"}
PUBLIC_PREFIXES = ("/api/auth/",)


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def extract_bearer_token(header: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header value.

    Raises:
        UnauthenticatedError: header missing, wrong scheme, or empty token.
    """
    if not header or not header.startswith(BEARER_PREFIX):
        raise UnauthenticatedError()
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError()
    return token


class BearerAuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        try:
            token = extract_bearer_token(request.headers.get("Authorization"))
            request.state.user = request.app.state.services.tokens.verify(token)
        except InvalidTokenError as e:
            logger.warning("[AUTH] Token verification failed: %s", e.context.get("reason", e.message))
            return self._reject(request, e)
        except UnauthenticatedError as e:
            return self._reject(request, e)

        return await call_next(request)

    @staticmethod
    def _reject(request: Request, exc: UnauthenticatedError) -> Response:
        return error_response(
            request,
            401,
            "unauthenticated",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(request: Request) -> TokenClaims:
    """
    FastAPI dependency returning the claims the gate attached.

    Raises UnauthenticatedError if the route was reached without passing
    through the gate (e.g. mounted on a public path by mistake).
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise UnauthenticatedError()
    return user

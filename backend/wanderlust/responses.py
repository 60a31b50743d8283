"""Builds the JSON error body shared by exception handlers and middleware."""

from typing import Any, Optional

from fastapi.responses import JSONResponse
from starlette.requests import Request

from wanderlust.middleware.request_id import request_id_var


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    headers: Optional[dict] = None,
    **extra: Any,
) -> JSONResponse:
    # The catch-all 500 handler runs outside RequestIDMiddleware, where the
    # ContextVar is already reset; request.state still carries the ID.
    rid = request_id_var.get("") or getattr(request.state, "request_id", "")
    content = {
        "success": False,
        "error": error,
        "message": message,
        **extra,
        "path": request.url.path,
        "request_id": rid,
    }
    return JSONResponse(status_code=status_code, content=content, headers=headers)

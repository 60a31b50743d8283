"""
Wanderlust Backend - Request Body Size Limit
==============================================

What:  Rejects requests whose body exceeds MAX_BODY_BYTES with HTTP 413.
How:   A declared Content-Length is checked before anything is read. A body
       without one (chunked transfer) is read here up to the limit: past it
       the request is answered with 413, otherwise the buffered chunks are
       replayed to the app unchanged. Itinerary payloads carry the full
       AI-generated plan, so the default limit is 5 MB rather than the usual
       few hundred KB.

Plain ASGI middleware rather than BaseHTTPMiddleware: the limit has to
apply to `receive`, which BaseHTTPMiddleware does not expose.
"""

import logging
from typing import List

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from wanderlust.exceptions import PayloadTooLargeError
from wanderlust.responses import error_response

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                response = error_response(
                    request, 400, "bad_request", "Invalid Content-Length header"
                )
                await response(scope, receive, send)
                return
            if size > self.max_body_bytes:
                await self._reject(request, size, scope, receive, send)
                return
            await self.app(scope, receive, send)
            return

        # No declared length: count the streamed body ourselves.
        buffered: List[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(request, received, scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(
        self, request: Request, size: int, scope: Scope, receive: Receive, send: Send
    ) -> None:
        exc = PayloadTooLargeError(limit=self.max_body_bytes)
        logger.warning(
            "Rejected %s %s: body of at least %d bytes exceeds %d",
            request.method,
            request.url.path,
            size,
            self.max_body_bytes,
        )
        response = error_response(request, 413, "payload_too_large", exc.message)
        await response(scope, receive, send)

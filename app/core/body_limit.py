"""Request body size cap, applied before any route parses JSON."""

import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

BODY_TOO_LARGE_MESSAGE = "Request body too large."


class BodySizeLimitMiddleware:
    """
    Refuse request bodies larger than max_body_bytes with 413.

    A declared Content-Length over the cap is refused before the body is read.
    Bodies without one (chunked) are counted as they stream in, and reading
    stops with an HTTPException once the cap is crossed.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            logger.warning(
                "Request body too large",
                extra={"content_length": int(declared), "max_bytes": self.max_body_bytes},
            )
            response = JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE_MESSAGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning(
                        "Request body too large",
                        extra={"size": received, "max_bytes": self.max_body_bytes},
                    )
                    raise HTTPException(status_code=413, detail=BODY_TOO_LARGE_MESSAGE)
            return message

        await self.app(scope, limited_receive, send)

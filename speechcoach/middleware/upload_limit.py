"""Request body cap enforced before the multipart parser spools anything."""

from __future__ import annotations

import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from speechcoach.config.settings import Settings
from speechcoach.pipelines.analysis.ingestion import upload_too_large

logger = logging.getLogger(__name__)

# Multipart boundaries and part headers on top of the file itself.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class UploadLimitMiddleware:
    """Reject request bodies larger than the upload cap.

    A declared ``Content-Length`` over the limit is answered with 413 without
    reading the body. Bodies without one are counted as they arrive, and the
    first chunk past the limit raises the same 413 inside the route.
    """

    def __init__(self, app: ASGIApp, config: Settings) -> None:
        self.app = app
        self.config = config

    @property
    def limit(self) -> int:
        return self.config.max_upload_bytes + MULTIPART_OVERHEAD_BYTES

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.limit
        declared = _declared_length(scope)
        if declared is not None and declared > limit:
            logger.info("Rejected %s %s: declared body of %d bytes", scope["method"], scope["path"], declared)
            exc = upload_too_large(self.config.max_upload_bytes)
            response = JSONResponse(exc.detail, status_code=exc.status_code)
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.info("Rejected %s %s: body exceeded %d bytes", scope["method"], scope["path"], limit)
                    raise upload_too_large(self.config.max_upload_bytes)
            return message

        await self.app(scope, limited_receive, send)


def _declared_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


__all__ = ["MULTIPART_OVERHEAD_BYTES", "UploadLimitMiddleware"]

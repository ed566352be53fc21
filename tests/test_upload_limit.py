"""Request body cap applied ahead of multipart parsing."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from speechcoach.middleware.upload_limit import MULTIPART_OVERHEAD_BYTES, UploadLimitMiddleware

MAX_UPLOAD = 1024
CHUNK = 64 * 1024
TOTAL = 5_000_000


class ChunkedBody:
    """ASGI ``receive`` that hands out a large body and counts what was pulled."""

    def __init__(self, total: int = TOTAL, chunk: int = CHUNK) -> None:
        self.remaining = total
        self.chunk = chunk
        self.pulled = 0

    async def __call__(self) -> dict:
        size = min(self.chunk, self.remaining)
        self.remaining -= size
        self.pulled += size
        return {"type": "http.request", "body": b"x" * size, "more_body": self.remaining > 0}


class Recorder:
    def __init__(self) -> None:
        self.messages: list[dict] = []

    async def __call__(self, message: dict) -> None:
        self.messages.append(message)


async def draining_app(scope, receive, send) -> None:
    while True:
        message = await receive()
        if not message.get("more_body"):
            break
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"ok"})


def http_scope(headers: list[tuple[bytes, bytes]]) -> dict:
    return {
        "type": "http",
        "method": "POST",
        "path": "/analyze-speech",
        "headers": headers,
    }


def make_middleware(app=draining_app) -> UploadLimitMiddleware:
    return UploadLimitMiddleware(app, config=SimpleNamespace(max_upload_bytes=MAX_UPLOAD))


def test_declared_oversize_body_is_rejected_without_reading():
    called = []

    async def app(scope, receive, send) -> None:
        called.append(scope)

    body = ChunkedBody()
    sent = Recorder()
    scope = http_scope([(b"content-length", str(TOTAL).encode())])

    asyncio.run(make_middleware(app)(scope, body, sent))

    assert called == []
    assert body.pulled == 0
    assert sent.messages[0]["status"] == 413
    assert json.loads(sent.messages[1]["body"])["error"] == "File too large"


def test_undeclared_body_stops_once_the_cap_is_passed():
    body = ChunkedBody()
    sent = Recorder()

    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(make_middleware()(http_scope([]), body, sent))

    assert excinfo.value.status_code == 413
    assert body.pulled <= MAX_UPLOAD + MULTIPART_OVERHEAD_BYTES + CHUNK
    assert body.pulled < TOTAL
    assert sent.messages == []


def test_body_under_the_cap_passes_through():
    body = ChunkedBody(total=MAX_UPLOAD, chunk=256)
    sent = Recorder()
    scope = http_scope([(b"content-length", str(MAX_UPLOAD).encode())])

    asyncio.run(make_middleware()(scope, body, sent))

    assert body.pulled == MAX_UPLOAD
    assert sent.messages[0]["status"] == 200


def test_non_http_scopes_are_untouched():
    seen = []

    async def app(scope, receive, send) -> None:
        seen.append(scope["type"])

    asyncio.run(make_middleware(app)({"type": "lifespan"}, ChunkedBody(), Recorder()))

    assert seen == ["lifespan"]

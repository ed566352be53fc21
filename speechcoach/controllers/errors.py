"""Translate pipeline and framework errors into JSON error bodies.

Every error response carries a short ``error`` code and, where useful, a
human-readable ``message``. Raw failure detail is only attached outside
production, and never includes provider credentials.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from speechcoach.pipelines.analysis import NO_SPEECH_MESSAGE, PipelineError
from speechcoach.services.errors import ErrorKind

logger = logging.getLogger(__name__)

_PIPELINE_ERRORS: dict[ErrorKind, tuple[int, str, str]] = {
    ErrorKind.NO_SPEECH: (
        status.HTTP_400_BAD_REQUEST,
        "No speech detected",
        NO_SPEECH_MESSAGE,
    ),
    ErrorKind.TIMEOUT: (
        status.HTTP_408_REQUEST_TIMEOUT,
        "Request timeout",
        "The analysis took too long. Please try with a shorter audio file.",
    ),
    ErrorKind.UPSTREAM_AUTH_FAILURE: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "API authentication failed",
        "There was an issue with the speech analysis service. Please try again later.",
    ),
}

_ANALYSIS_FAILED = (
    status.HTTP_500_INTERNAL_SERVER_ERROR,
    "Analysis failed",
    "Failed to analyze speech. Please ensure you uploaded a valid audio file and try again.",
)


def pipeline_error_payload(exc: PipelineError, *, include_details: bool) -> tuple[int, dict[str, Any]]:
    """Return the status code and body for a failed analysis."""

    mapped = _PIPELINE_ERRORS.get(exc.kind)
    status_code, error, message = mapped or _ANALYSIS_FAILED
    content: dict[str, Any] = {"error": error, "message": message}
    if include_details and mapped is None:
        content["details"] = exc.message
    return status_code, content


def register_exception_handlers(app: FastAPI, *, include_details: bool) -> None:
    """Install the JSON error handlers on the application."""

    @app.exception_handler(PipelineError)
    async def pipeline_exception_handler(request: Request, exc: PipelineError):
        status_code, content = pipeline_error_payload(exc, include_details=include_details)
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        elif exc.status_code == status.HTTP_404_NOT_FOUND:
            content = {"error": "Endpoint not found"}
        else:
            content = {"error": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        content: dict[str, Any] = {
            "error": "Invalid request",
            "message": "The request could not be processed. Please check the submitted form.",
        }
        if include_details:
            content["details"] = str(exc.errors())
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "message": "Something went wrong. Please try again.",
            },
        )


__all__ = ["pipeline_error_payload", "register_exception_handlers"]

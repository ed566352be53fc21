"""Error taxonomy shared by the external service wrappers."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to every failure of an external call."""

    NO_SPEECH = "no_speech"
    TIMEOUT = "timeout"
    UPSTREAM_AUTH_FAILURE = "upstream_auth_failure"
    UPSTREAM_ERROR = "upstream_error"
    SYNTHESIS_FAILURE = "synthesis_failure"
    UNCLASSIFIED = "unclassified"


_AUTH_STATUS_CODES = frozenset({401, 403})


class UpstreamServiceError(RuntimeError):
    """Raised when a provider call fails; carries the classified kind."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UPSTREAM_ERROR,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.provider = provider
        self.status_code = status_code


def kind_for_status(status_code: int) -> ErrorKind:
    """Map a non-2xx provider status code onto the error taxonomy."""

    if status_code in _AUTH_STATUS_CODES:
        return ErrorKind.UPSTREAM_AUTH_FAILURE
    return ErrorKind.UPSTREAM_ERROR


__all__ = ["ErrorKind", "UpstreamServiceError", "kind_for_status"]

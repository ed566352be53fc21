"""Typed containers shared across the speech analysis pipeline.

These live in their own module so the ingestion, flow and controller layers
can import them without creating circular dependencies.
"""

from __future__ import annotations

from enum import Enum

from speechcoach.services.errors import ErrorKind


class PipelineStage(str, Enum):
    """Ordered stages of one analysis run."""

    TRANSCRIPTION = "transcription"
    FEEDBACK = "feedback"
    SYNTHESIS = "synthesis"
    STORAGE = "storage"


class PipelineError(RuntimeError):
    """Raised when a stage fails; no record is stored for the run."""

    def __init__(self, stage: PipelineStage, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.stage = stage
        self.kind = kind
        self.message = message

    @property
    def is_client_error(self) -> bool:
        return self.kind is ErrorKind.NO_SPEECH

    def __repr__(self) -> str:
        return f"PipelineError(stage={self.stage.value!r}, kind={self.kind.value!r}, message={self.message!r})"


__all__ = ["PipelineError", "PipelineStage"]

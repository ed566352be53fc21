"""Service layer helpers for external integrations."""

from .errors import ErrorKind, UpstreamServiceError
from .feedback import FeedbackResult, FeedbackService
from .llm_client import GeminiLlmClient, LlmInvocationError, build_llm_client
from .result_store import ResultNotFoundError, ResultStore
from .speech_synthesis import (
    PollySpeechService,
    SynthesisError,
    SynthesisResult,
    build_speech_service,
)
from .transcribe import (
    DeepgramTranscribeService,
    TranscriptionError,
    TranscriptionResult,
    build_transcribe_service,
)

__all__ = [
    "ErrorKind",
    "UpstreamServiceError",
    "FeedbackResult",
    "FeedbackService",
    "GeminiLlmClient",
    "LlmInvocationError",
    "build_llm_client",
    "ResultNotFoundError",
    "ResultStore",
    "PollySpeechService",
    "SynthesisError",
    "SynthesisResult",
    "build_speech_service",
    "DeepgramTranscribeService",
    "TranscriptionError",
    "TranscriptionResult",
    "build_transcribe_service",
]

"""Amazon Polly text-to-speech for the corrected transcript."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from speechcoach.config.settings import settings
from speechcoach.services.aws import create_boto3_client

from .errors import ErrorKind, UpstreamServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisResult:
    """Encoded speech produced for a piece of text."""

    audio_bytes: bytes
    media_type: str
    voice_id: str


class SynthesisError(UpstreamServiceError):
    """Raised when Polly cannot produce audio for the corrected text."""

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.SYNTHESIS_FAILURE, provider="polly")


class PollySpeechService:
    """Generate MP3 speech with Amazon Polly."""

    def __init__(
        self,
        polly_client: Any,
        *,
        voice_id: str = "Joanna",
        engine: str = "neural",
    ) -> None:
        self._client = polly_client
        self._voice_id = voice_id
        self._engine = engine

    async def synthesize(self, text: str, language_code: str) -> SynthesisResult:
        """Convert text to speech and return the MP3 bytes."""

        if not text or not text.strip():
            raise SynthesisError("Cannot synthesize empty text.")

        try:
            response: dict[str, Any] = await run_in_threadpool(
                self._client.synthesize_speech,
                Text=text,
                VoiceId=self._voice_id,
                LanguageCode=language_code,
                Engine=self._engine,
                OutputFormat="mp3",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Polly synth failed for voice '%s'", self._voice_id)
            raise SynthesisError(f"Failed to synthesize speech: {exc}") from exc

        audio_stream = response.get("AudioStream")
        if audio_stream is None:
            raise SynthesisError("Polly returned no audio stream.")
        try:
            audio_bytes = await run_in_threadpool(audio_stream.read)
        except (BotoCoreError, OSError) as exc:
            raise SynthesisError(f"Failed to read Polly audio stream: {exc}") from exc
        finally:
            audio_stream.close()

        if not audio_bytes:
            raise SynthesisError("Polly returned an empty audio stream.")

        return SynthesisResult(
            audio_bytes=audio_bytes,
            media_type=response.get("ContentType") or "audio/mpeg",
            voice_id=self._voice_id,
        )


def build_speech_service() -> PollySpeechService:
    """Construct the Polly-backed service from application settings."""

    return PollySpeechService(
        create_boto3_client("polly", region_name=settings.polly.region),
        voice_id=settings.polly.voice_id,
        engine=settings.polly.engine,
    )


__all__ = [
    "PollySpeechService",
    "SynthesisError",
    "SynthesisResult",
    "build_speech_service",
]

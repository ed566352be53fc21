"""Deepgram pre-recorded transcription over HTTP."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from speechcoach.config.settings import settings

from .errors import ErrorKind, UpstreamServiceError, kind_for_status

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "audio/wav"

# Fixed provider options; not exposed as parameters.
_LISTEN_PARAMS = {"punctuate": "true", "diarize": "false"}


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to the pipeline."""

    transcript: str
    confidence: float | None = None


class TranscriptionError(UpstreamServiceError):
    """Raised when Deepgram fails to process audio successfully."""


class DeepgramTranscribeService:
    """High-level facade for sending recorded audio to Deepgram."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.deepgram.com/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def transcribe(
        self,
        audio_bytes: bytes,
        content_type: str | None = None,
    ) -> TranscriptionResult | None:
        """Return the primary transcript, or ``None`` when no speech was found."""

        if not audio_bytes:
            raise ValueError("The uploaded audio file is empty.")

        headers = {
            "Authorization": f"Token {self._api_key}",
            "Content-Type": content_type or DEFAULT_CONTENT_TYPE,
        }

        logger.info("Sending %d bytes to Deepgram (%s)", len(audio_bytes), headers["Content-Type"])
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        ) as client:
            try:
                # httpx timeouts are per phase; wait_for bounds the whole call.
                response = await asyncio.wait_for(
                    client.post(
                        "/listen",
                        params=_LISTEN_PARAMS,
                        content=audio_bytes,
                        headers=headers,
                    ),
                    timeout=self._timeout,
                )
            except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
                raise TranscriptionError(
                    f"Deepgram request timed out after {self._timeout}s",
                    kind=ErrorKind.TIMEOUT,
                    provider="deepgram",
                ) from exc
            except httpx.RequestError as exc:
                raise TranscriptionError(
                    f"Failed to reach Deepgram: {exc}",
                    provider="deepgram",
                ) from exc

        if not response.is_success:
            raise TranscriptionError(
                f"Deepgram API error: {response.status_code}",
                kind=kind_for_status(response.status_code),
                provider="deepgram",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TranscriptionError(
                "Deepgram returned a non-JSON body",
                provider="deepgram",
                status_code=response.status_code,
            ) from exc

        return _extract_transcript(payload)


def _extract_transcript(payload: Any) -> TranscriptionResult | None:
    """Pick ``results.channels[0].alternatives[0]`` out of a Deepgram response."""

    if not isinstance(payload, dict):
        return None
    results = payload.get("results")
    channels = results.get("channels") if isinstance(results, dict) else None
    if not channels or not isinstance(channels[0], dict):
        return None
    alternatives = channels[0].get("alternatives")
    if not alternatives or not isinstance(alternatives[0], dict):
        return None

    best = alternatives[0]
    transcript = best.get("transcript")
    if not isinstance(transcript, str) or not transcript.strip():
        logger.warning("Deepgram returned no transcript")
        return None

    confidence = best.get("confidence")
    return TranscriptionResult(
        transcript=transcript,
        confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
    )


def build_transcribe_service() -> DeepgramTranscribeService:
    """Construct the service from application settings."""

    api_key = settings.deepgram.api_key
    return DeepgramTranscribeService(
        api_key.get_secret_value() if api_key else "",
        base_url=settings.deepgram.base_url,
        timeout=settings.deepgram.timeout_seconds,
    )


__all__ = [
    "DeepgramTranscribeService",
    "TranscriptionError",
    "TranscriptionResult",
    "build_transcribe_service",
]

"""Orchestration of one speech analysis run.

Stages execute strictly in order, each one feeding the next:

1. ``transcription``: send the uploaded audio to Deepgram.
2. ``feedback``: ask Gemini for tutor feedback and a corrected transcript.
3. ``synthesis``: render the corrected transcript to MP3 with Polly.
4. ``storage``: assemble the ``ResultRecord`` and hand it to the result store.

A failure in any stage aborts the run with a ``PipelineError`` and nothing is
stored. There are no retries.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, Protocol
from uuid import uuid4

from speechcoach.domain.models import ResultRecord
from speechcoach.services.errors import ErrorKind, UpstreamServiceError
from speechcoach.services.feedback import FeedbackResult
from speechcoach.services.result_store import ResultStore
from speechcoach.services.speech_synthesis import SynthesisResult
from speechcoach.services.transcribe import TranscriptionResult
from speechcoach.telemetry import observe_stage, record_analysis

from .types import PipelineError, PipelineStage

logger = logging.getLogger("speechcoach.services.analysis_pipeline")
transcript_logger = logging.getLogger("speechcoach.logs.transcript")

NO_SPEECH_MESSAGE = (
    "Could not detect any speech in the audio file. "
    "Please try again with a clearer recording."
)


class Transcriber(Protocol):
    async def transcribe(
        self, audio_bytes: bytes, content_type: str | None = None
    ) -> TranscriptionResult | None: ...


class FeedbackProvider(Protocol):
    async def critique(self, transcript: str) -> FeedbackResult: ...


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str, language_code: str) -> SynthesisResult: ...


ReleaseAudio = Callable[[], Awaitable[None]]


def new_analysis_id() -> str:
    return f"analysis_{uuid4().hex}"


@contextmanager
def _stage(stage: PipelineStage) -> Iterator[None]:
    """Time a stage and translate its failures into ``PipelineError``."""

    started = time.perf_counter()
    try:
        yield
    except PipelineError:
        raise
    except UpstreamServiceError as exc:
        raise PipelineError(stage, exc.kind, str(exc)) from exc
    except Exception as exc:
        raise PipelineError(stage, ErrorKind.UNCLASSIFIED, str(exc) or type(exc).__name__) from exc
    finally:
        observe_stage(stage.value, time.perf_counter() - started)


class AnalysisPipeline:
    """Compose transcription, feedback and synthesis into a stored result."""

    def __init__(
        self,
        *,
        transcriber: Transcriber,
        feedback: FeedbackProvider,
        synthesizer: SpeechSynthesizer,
        store: ResultStore,
        language_code: str = "en-US",
        retention_seconds: float = 3600.0,
        id_factory: Callable[[], str] = new_analysis_id,
    ) -> None:
        self._transcriber = transcriber
        self._feedback = feedback
        self._synthesizer = synthesizer
        self._store = store
        self._language_code = language_code
        self._retention_seconds = retention_seconds
        self._id_factory = id_factory

    @property
    def store(self) -> ResultStore:
        return self._store

    async def run(
        self,
        audio_bytes: bytes,
        content_type: str,
        *,
        release_audio: ReleaseAudio | None = None,
    ) -> ResultRecord:
        """Execute every stage and return the stored record."""

        try:
            record = await self._run(audio_bytes, content_type, release_audio)
        except PipelineError as exc:
            record_analysis("failure", exc.stage.value, exc.kind.value)
            log = logger.info if exc.is_client_error else logger.error
            log("Analysis failed stage=%s kind=%s: %s", exc.stage.value, exc.kind.value, exc.message)
            raise
        record_analysis("success")
        logger.info("Analysis complete: %s", record.id)
        return record

    async def _run(
        self,
        audio_bytes: bytes,
        content_type: str,
        release_audio: ReleaseAudio | None,
    ) -> ResultRecord:
        with _stage(PipelineStage.TRANSCRIPTION):
            try:
                transcription = await self._transcriber.transcribe(audio_bytes, content_type)
            finally:
                # Raw audio must not outlive the transcription call.
                if release_audio is not None:
                    await release_audio()

        if transcription is None or not transcription.transcript.strip():
            raise PipelineError(PipelineStage.TRANSCRIPTION, ErrorKind.NO_SPEECH, NO_SPEECH_MESSAGE)

        transcript = transcription.transcript
        transcript_logger.info("student | text=%s", transcript)

        with _stage(PipelineStage.FEEDBACK):
            critique = await self._feedback.critique(transcript)

        with _stage(PipelineStage.SYNTHESIS):
            speech = await self._synthesizer.synthesize(critique.corrected_text, self._language_code)

        with _stage(PipelineStage.STORAGE):
            analysis_id = self._id_factory()
            record = ResultRecord(
                id=analysis_id,
                transcript=transcript,
                feedback=critique.feedback,
                corrected_text=critique.corrected_text,
                audio=speech.audio_bytes,
            )
            self._store.put(analysis_id, record, self._retention_seconds)

        transcript_logger.info("corrected | id=%s | text=%s", analysis_id, record.corrected_text)
        return record


__all__ = [
    "AnalysisPipeline",
    "FeedbackProvider",
    "NO_SPEECH_MESSAGE",
    "SpeechSynthesizer",
    "Transcriber",
    "new_analysis_id",
]

"""Shared fixtures: provider credentials and fake external services."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# The app factory exits when either key is missing, so set them before import.
os.environ.setdefault("DEEPGRAM_API_KEY", "test-deepgram-key")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("ENVIRONMENT", "development")
_LOG_DIR = Path(tempfile.mkdtemp(prefix="speechcoach-logs-"))
os.environ.setdefault("LOG_FILE", str(_LOG_DIR / "app.log"))
os.environ.setdefault("PIPELINE_LOG_FILE", str(_LOG_DIR / "analysis_pipeline.log"))
os.environ.setdefault("TRANSCRIPT_LOG_FILE", str(_LOG_DIR / "transcripts.log"))

from speechcoach.services.feedback import FeedbackResult  # noqa: E402
from speechcoach.services.speech_synthesis import SynthesisResult  # noqa: E402
from speechcoach.services.transcribe import TranscriptionResult  # noqa: E402


class FakeTranscriber:
    def __init__(self, transcript: str | None = "he go to school yesterday", error: Exception | None = None):
        self.transcript = transcript
        self.error = error
        self.calls: list[tuple[bytes, str | None]] = []

    async def transcribe(self, audio_bytes, content_type=None):
        self.calls.append((audio_bytes, content_type))
        if self.error is not None:
            raise self.error
        if self.transcript is None:
            return None
        return TranscriptionResult(transcript=self.transcript)


class FakeFeedback:
    def __init__(
        self,
        feedback: str = "Watch subject-verb agreement and past tense.",
        corrected_text: str = "He went to school yesterday.",
        error: Exception | None = None,
    ):
        self.feedback = feedback
        self.corrected_text = corrected_text
        self.error = error
        self.calls: list[str] = []

    async def critique(self, transcript):
        self.calls.append(transcript)
        if self.error is not None:
            raise self.error
        return FeedbackResult(
            feedback=self.feedback,
            corrected_text=self.corrected_text,
            raw_response=f"Feedback: {self.feedback}\nCorrected: {self.corrected_text}",
        )


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"ID3-fake-mp3", error: Exception | None = None):
        self.audio = audio
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def synthesize(self, text, language_code):
        self.calls.append((text, language_code))
        if self.error is not None:
            raise self.error
        return SynthesisResult(audio_bytes=self.audio, media_type="audio/mpeg", voice_id="TestVoice")


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def fake_feedback() -> FakeFeedback:
    return FakeFeedback()


@pytest.fixture
def fake_synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

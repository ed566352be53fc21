"""Integration-style tests for the speech analysis endpoints."""

from __future__ import annotations

import base64

import pytest
from conftest import FakeClock, FakeFeedback, FakeSynthesizer, FakeTranscriber
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

from speechcoach.config.settings import settings
from speechcoach.controllers.dependencies import get_analysis_pipeline, get_result_store
from speechcoach.main import app
from speechcoach.pipelines.analysis import AnalysisPipeline
from speechcoach.services.errors import ErrorKind
from speechcoach.services.llm_client import LlmInvocationError
from speechcoach.services.result_store import ResultStore
from speechcoach.services.speech_synthesis import SynthesisError
from speechcoach.services.transcribe import TranscriptionError

WAV_BYTES = b"RIFF$\x00\x00\x00WAVEfmt " + b"\x00" * 64


class Harness:
    """Bundle of fakes wired into the app through dependency overrides."""

    def __init__(self) -> None:
        self.clock = FakeClock()
        self.store = ResultStore(clock=self.clock)
        self.transcriber = FakeTranscriber()
        self.feedback = FakeFeedback()
        self.synthesizer = FakeSynthesizer()

    def pipeline(self) -> AnalysisPipeline:
        return AnalysisPipeline(
            transcriber=self.transcriber,
            feedback=self.feedback,
            synthesizer=self.synthesizer,
            store=self.store,
            retention_seconds=3600,
        )


@pytest.fixture
def harness():
    state = Harness()
    app.dependency_overrides[get_result_store] = lambda: state.store
    app.dependency_overrides[get_analysis_pipeline] = state.pipeline
    yield state
    app.dependency_overrides.clear()


@pytest.fixture
def client(harness) -> TestClient:
    return TestClient(app)


def upload(client: TestClient, data: bytes = WAV_BYTES, filename: str = "speech.wav", content_type: str = "audio/wav"):
    return client.post("/analyze-speech", files={"audio": (filename, data, content_type)})


def test_analyze_speech_happy_path(client, harness):
    response = upload(client)

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    analysis_id = payload["analysisId"]
    assert payload["redirectUrl"] == f"/results/{analysis_id}"
    assert payload["preview"] == {
        "transcript": "he go to school yesterday",
        "hasCorrections": True,
    }
    assert harness.transcriber.calls == [(WAV_BYTES, "audio/wav")]

    stored = harness.store.get(analysis_id)
    assert stored.feedback == "Watch subject-verb agreement and past tense."
    assert stored.corrected_text == "He went to school yesterday."


def test_preview_truncates_long_transcripts(client, harness):
    harness.transcriber.transcript = "a" * 150
    harness.feedback.corrected_text = "A" * 150

    payload = upload(client).json()

    assert payload["preview"]["transcript"] == "a" * 100 + "..."
    assert payload["preview"]["hasCorrections"] is False


def test_guessed_content_type_is_forwarded(client, harness):
    response = upload(client, filename="speech.mp3", content_type="application/octet-stream")

    assert response.status_code == 200
    assert harness.transcriber.calls[0][1] == "audio/mpeg"


def test_missing_file_is_rejected(client, harness):
    response = client.post("/analyze-speech", data={"note": "no audio here"})

    assert response.status_code == 400
    assert response.json()["error"] == "No audio file uploaded"
    assert harness.transcriber.calls == []


def test_empty_file_is_rejected(client, harness):
    response = upload(client, data=b"")

    assert response.status_code == 400
    assert response.json()["error"] == "No audio file uploaded"
    assert harness.transcriber.calls == []


def test_oversized_upload_is_rejected_before_the_pipeline(client, harness, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)

    response = upload(client, data=b"x" * 64)

    assert response.status_code == 413
    assert response.json()["error"] == "File too large"
    assert harness.transcriber.calls == []


def test_large_declared_body_is_rejected_by_the_middleware(client, harness, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 1024)

    response = upload(client, data=b"x" * 5_000_000)

    assert response.status_code == 413
    assert response.json()["error"] == "File too large"
    assert harness.transcriber.calls == []


class EventTranscriber(FakeTranscriber):
    def __init__(self, events: list[str], **kwargs) -> None:
        super().__init__(**kwargs)
        self.events = events

    async def transcribe(self, audio_bytes, content_type=None):
        self.events.append("transcribe")
        return await super().transcribe(audio_bytes, content_type)


class EventFeedback(FakeFeedback):
    def __init__(self, events: list[str], **kwargs) -> None:
        super().__init__(**kwargs)
        self.events = events

    async def critique(self, transcript):
        self.events.append("critique")
        return await super().critique(transcript)


@pytest.fixture
def upload_events(monkeypatch) -> list[str]:
    events: list[str] = []
    original_close = StarletteUploadFile.close

    async def tracking_close(self) -> None:
        events.append("close")
        await original_close(self)

    monkeypatch.setattr(StarletteUploadFile, "close", tracking_close)
    return events


def test_upload_is_closed_right_after_transcription(client, harness, upload_events):
    harness.transcriber = EventTranscriber(upload_events)
    harness.feedback = EventFeedback(upload_events)

    response = upload(client)

    assert response.status_code == 200
    assert upload_events[:3] == ["transcribe", "close", "critique"]


def test_upload_is_closed_when_transcription_fails(client, harness, upload_events):
    harness.transcriber = EventTranscriber(
        upload_events,
        error=TranscriptionError("Deepgram API error: 500"),
    )
    harness.feedback = EventFeedback(upload_events)

    response = upload(client)

    assert response.status_code == 500
    assert upload_events[:2] == ["transcribe", "close"]
    assert "critique" not in upload_events


def test_silence_returns_no_speech_and_stores_nothing(client, harness):
    harness.transcriber.transcript = None

    response = upload(client)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "No speech detected"
    assert "Could not detect any speech" in body["message"]
    assert len(harness.store) == 0
    assert harness.feedback.calls == []


def test_timeout_maps_to_408(client, harness):
    harness.transcriber.error = TranscriptionError("timed out", kind=ErrorKind.TIMEOUT)

    response = upload(client)

    assert response.status_code == 408
    assert response.json()["error"] == "Request timeout"


def test_auth_failure_maps_to_generic_500(client, harness):
    harness.feedback.error = LlmInvocationError("Gemini API error: 401", kind=ErrorKind.UPSTREAM_AUTH_FAILURE)

    response = upload(client)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "API authentication failed"
    assert "details" not in body
    assert len(harness.store) == 0


def test_synthesis_failure_includes_details_outside_production(client, harness):
    harness.synthesizer.error = SynthesisError("Polly returned an empty audio stream.")

    response = upload(client)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Analysis failed"
    assert body["details"] == "Polly returned an empty audio stream."
    assert len(harness.store) == 0


def test_get_analysis_returns_full_record(client, harness):
    analysis_id = upload(client).json()["analysisId"]

    response = client.get(f"/api/analysis/{analysis_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == analysis_id
    assert body["transcript"] == "he go to school yesterday"
    assert body["feedback"] == "Watch subject-verb agreement and past tense."
    assert body["correctedText"] == "He went to school yesterday."
    assert base64.b64decode(body["audio"]) == b"ID3-fake-mp3"
    assert body["timestamp"]


def test_results_expire_after_the_retention_window(client, harness):
    analysis_id = upload(client).json()["analysisId"]

    harness.clock.advance(3599)
    assert client.get(f"/api/analysis/{analysis_id}").status_code == 200

    harness.clock.advance(2)
    response = client.get(f"/api/analysis/{analysis_id}")
    assert response.status_code == 404
    assert response.json() == {"error": "Analysis not found"}
    assert client.get(f"/api/download/{analysis_id}").status_code == 404


def test_download_returns_mp3_attachment(client, harness):
    analysis_id = upload(client).json()["analysisId"]

    response = client.get(f"/api/download/{analysis_id}")

    assert response.status_code == 200
    assert response.content == b"ID3-fake-mp3"
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.headers["content-disposition"] == (
        f'attachment; filename="corrected_speech_{analysis_id}.mp3"'
    )


def test_download_unknown_id_is_404(client):
    response = client.get("/api/download/analysis_unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Audio file not found"}


def test_health_reports_store_size(client, harness):
    upload(client)

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["activeAnalyses"] == 1
    assert body["timestamp"]


def test_unmatched_route_returns_json_404(client):
    response = client.get("/does/not/exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}


def test_unhandled_error_returns_generic_500(harness):
    def broken_pipeline():
        raise RuntimeError("wiring exploded")

    app.dependency_overrides[get_analysis_pipeline] = broken_pipeline
    client = TestClient(app, raise_server_exceptions=False)

    response = upload(client)

    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal server error",
        "message": "Something went wrong. Please try again.",
    }


def test_metrics_endpoint_exposes_pipeline_counters(client):
    upload(client)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "speech_analyses_total" in response.text


def test_app_lifecycle_starts_and_stops_the_sweeper():
    with TestClient(app) as lifecycle_client:
        store = app.state.result_store
        assert store._sweeper is not None
        assert lifecycle_client.get("/api/health").status_code == 200
    assert store._sweeper is None

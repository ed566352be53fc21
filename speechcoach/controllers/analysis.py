"""Speech analysis endpoints.

``POST /analyze-speech`` validates the upload and runs the
``AnalysisPipeline`` (see ``speechcoach.pipelines.analysis.flow``); the GET
endpoints read completed results back out of the in-memory result store until
they expire.
"""

import logging

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from fastapi.responses import Response

from speechcoach.config.settings import settings
from speechcoach.controllers.dependencies import AnalysisPipelineDep, ResultStoreDep
from speechcoach.pipelines.analysis import (
    ensure_upload_present,
    read_audio_bytes,
    resolve_content_type,
)
from speechcoach.services.result_store import ResultNotFoundError
from speechcoach.views import AnalysisResultResponse, AnalyzeSpeechResponse

router = APIRouter(tags=["analysis"])

logger = logging.getLogger(__name__)

_AUDIO_FILE_UPLOAD = File(None)


@router.post("/analyze-speech", response_model=AnalyzeSpeechResponse)
async def analyze_speech(
    pipeline: AnalysisPipelineDep,
    audio: UploadFile | None = _AUDIO_FILE_UPLOAD,
) -> AnalyzeSpeechResponse:
    """Transcribe an uploaded recording, critique it and synthesize the correction."""

    audio_file = ensure_upload_present(audio)
    try:
        logger.info("Received file: %s (%s bytes)", audio_file.filename, audio_file.size)
        content_type = resolve_content_type(audio_file)
        audio_bytes = await read_audio_bytes(audio_file, settings.max_upload_bytes)
        record = await pipeline.run(
            audio_bytes,
            content_type,
            release_audio=audio_file.close,
        )
    finally:
        await audio_file.close()

    return AnalyzeSpeechResponse.from_record(record)


@router.get("/api/analysis/{analysis_id}", response_model=AnalysisResultResponse)
async def get_analysis(analysis_id: str, store: ResultStoreDep) -> AnalysisResultResponse:
    try:
        record = store.get(analysis_id)
    except ResultNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Analysis not found"},
        ) from None
    return AnalysisResultResponse.from_record(record)


@router.get("/api/download/{analysis_id}", response_class=Response)
async def download_audio(analysis_id: str, store: ResultStoreDep) -> Response:
    """Return the corrected speech as an MP3 attachment."""

    try:
        audio_bytes = store.get_audio(analysis_id)
    except ResultNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Audio file not found"},
        ) from None

    return Response(
        content=audio_bytes,
        media_type="audio/mpeg",
        headers={
            "Content-Disposition": f'attachment; filename="corrected_speech_{analysis_id}.mp3"',
        },
    )

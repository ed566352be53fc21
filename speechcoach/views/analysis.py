"""Pydantic schemas for speech analysis responses."""

import base64
from datetime import datetime

from pydantic import BaseModel, Field

from speechcoach.domain.models import ResultRecord


class AnalysisPreview(BaseModel):
    transcript: str = Field(..., description="Transcript, truncated to 100 characters")
    hasCorrections: bool = Field(
        ..., description="Whether the corrected text differs from the transcript (ignoring case)"
    )


class AnalyzeSpeechResponse(BaseModel):
    """Returned once an upload has been fully analysed."""

    success: bool = True
    analysisId: str
    redirectUrl: str
    preview: AnalysisPreview

    @classmethod
    def from_record(cls, record: ResultRecord) -> "AnalyzeSpeechResponse":
        return cls(
            analysisId=record.id,
            redirectUrl=f"/results/{record.id}",
            preview=AnalysisPreview(
                transcript=record.preview_transcript,
                hasCorrections=record.has_corrections,
            ),
        )


class AnalysisResultResponse(BaseModel):
    """Full stored analysis, audio encoded as base64."""

    id: str
    transcript: str
    feedback: str
    correctedText: str
    audio: str = Field(..., description="Base64-encoded MP3 of the corrected speech")
    timestamp: datetime

    @classmethod
    def from_record(cls, record: ResultRecord) -> "AnalysisResultResponse":
        return cls(
            id=record.id,
            transcript=record.transcript,
            feedback=record.feedback,
            correctedText=record.corrected_text,
            audio=base64.b64encode(record.audio).decode("ascii"),
            timestamp=record.created_at,
        )

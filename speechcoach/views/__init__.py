"""Pydantic schemas used as views in the MVC architecture."""

from .analysis import AnalysisPreview, AnalysisResultResponse, AnalyzeSpeechResponse
from .common import ErrorResponse, HealthResponse

__all__ = [
    "AnalysisPreview",
    "AnalysisResultResponse",
    "AnalyzeSpeechResponse",
    "ErrorResponse",
    "HealthResponse",
]

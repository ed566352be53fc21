"""Speech analysis pipeline package.

Modules are organised by the order in which ``POST /analyze-speech`` executes:

1. ``ingestion``: validate the upload and obtain raw audio bytes.
2. ``flow``: transcription, feedback, synthesis and storage of the result.

``types`` holds the stage enum and the error raised when a stage fails.
"""

from .flow import AnalysisPipeline, NO_SPEECH_MESSAGE, new_analysis_id
from .ingestion import (
    ensure_upload_present,
    read_audio_bytes,
    resolve_content_type,
)
from .types import PipelineError, PipelineStage

__all__ = [
    "AnalysisPipeline",
    "NO_SPEECH_MESSAGE",
    "PipelineError",
    "PipelineStage",
    "ensure_upload_present",
    "new_analysis_id",
    "read_audio_bytes",
    "resolve_content_type",
]

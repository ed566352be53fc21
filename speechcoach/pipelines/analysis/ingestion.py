"""Request ingestion helpers (first stage of the analysis pipeline)."""

from __future__ import annotations

import mimetypes

from fastapi import HTTPException, UploadFile, status

from speechcoach.services.transcribe import DEFAULT_CONTENT_TYPE

_READ_CHUNK_BYTES = 1024 * 1024

NO_FILE_DETAIL = {
    "error": "No audio file uploaded",
    "message": "Please select an audio file to analyze",
}


def upload_too_large(max_bytes: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail={
            "error": "File too large",
            "message": f"Audio uploads are limited to {max_bytes // (1024 * 1024)} MB.",
        },
    )


def ensure_upload_present(audio_file: UploadFile | None) -> UploadFile:
    """Reject requests that did not carry an audio part."""

    if audio_file is None or not audio_file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=NO_FILE_DETAIL)
    return audio_file


def resolve_content_type(audio_file: UploadFile) -> str:
    """Best-effort MIME type: declared, then guessed from the name, then generic."""

    content_type = audio_file.content_type
    if not content_type or content_type == "application/octet-stream":
        guessed_type = None
        if audio_file.filename:
            guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type or content_type
    if not content_type or content_type == "application/octet-stream":
        content_type = DEFAULT_CONTENT_TYPE
    return content_type


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int) -> bytes:
    """Load the upload into memory without ever buffering more than the cap."""

    if audio_file.size is not None and audio_file.size > max_bytes:
        raise upload_too_large(max_bytes)

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await audio_file.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise upload_too_large(max_bytes)
        chunks.append(chunk)

    if not total:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=NO_FILE_DETAIL)
    return b"".join(chunks)


__all__ = [
    "NO_FILE_DETAIL",
    "upload_too_large",
    "ensure_upload_present",
    "read_audio_bytes",
    "resolve_content_type",
]

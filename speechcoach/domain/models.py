from dataclasses import dataclass, field
from datetime import datetime, timezone

PREVIEW_LENGTH = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ResultRecord:
    """Immutable outcome of one completed speech analysis."""

    id: str
    transcript: str
    feedback: str
    corrected_text: str
    audio: bytes = field(repr=False)
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.transcript.strip():
            raise ValueError("ResultRecord requires a non-empty transcript")
        if not self.corrected_text.strip():
            raise ValueError("ResultRecord requires non-empty corrected text")

    @property
    def has_corrections(self) -> bool:
        """True when the corrected text differs from the transcript ignoring case."""
        return self.corrected_text.lower() != self.transcript.lower()

    @property
    def preview_transcript(self) -> str:
        if len(self.transcript) > PREVIEW_LENGTH:
            return self.transcript[:PREVIEW_LENGTH] + "..."
        return self.transcript

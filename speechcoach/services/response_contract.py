"""Parsing of the two-section tutor response.

The model is expected to answer with a ``Feedback:`` section followed by a
``Corrected:`` section. Markers are matched case-insensitively; anything the
model adds outside them is ignored. When a section cannot be located the
fallbacks below apply, so callers always receive both fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_FEEDBACK = "No specific feedback generated."

_FEEDBACK_PATTERN = re.compile(r"Feedback:\s*(.*?)(?=Corrected:|\Z)", re.IGNORECASE | re.DOTALL)
_CORRECTED_PATTERN = re.compile(r"Corrected:\s*(.*)\Z", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class FeedbackSections:
    feedback: str
    corrected_text: str
    feedback_found: bool
    corrected_found: bool


def _capture(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def parse_feedback_response(text: str | None, transcript: str) -> FeedbackSections:
    """Split the model output into feedback and corrected text.

    A missing ``Feedback:`` section yields ``DEFAULT_FEEDBACK``, while a present
    but blank one is returned as the empty string. A missing or blank
    ``Corrected:`` section yields ``transcript`` unchanged.
    """

    raw = text or ""
    feedback = _capture(_FEEDBACK_PATTERN, raw)
    corrected = _capture(_CORRECTED_PATTERN, raw) or None
    return FeedbackSections(
        feedback=feedback if feedback is not None else DEFAULT_FEEDBACK,
        corrected_text=corrected if corrected is not None else transcript,
        feedback_found=feedback is not None,
        corrected_found=corrected is not None,
    )


__all__ = ["DEFAULT_FEEDBACK", "FeedbackSections", "parse_feedback_response"]

"""Prompt construction for the tutor feedback request.

The model is asked for exactly two labelled sections so the response can be
split by ``response_contract.parse_feedback_response``.
"""

from __future__ import annotations

FEEDBACK_MARKER = "Feedback:"
CORRECTED_MARKER = "Corrected:"

TUTOR_PERSONA = (
    "You are a helpful English language tutor. Analyze the following speech "
    "transcript and provide constructive feedback on grammar, pronunciation "
    "(based on likely intended words), and fluency."
)

RESPONSE_FORMAT = (
    "Please respond in this exact format:\n"
    f"{FEEDBACK_MARKER} [Provide specific, encouraging feedback about grammar mistakes, "
    "word choice, or pronunciation issues. Be constructive and educational.]\n"
    f"{CORRECTED_MARKER} [Provide the corrected version of the text with proper grammar "
    "and word choice]"
)

CLOSING_GUIDANCE = (
    "Keep feedback encouraging and educational. "
    "Focus on the most important improvements."
)


def build_feedback_prompt(transcript: str) -> str:
    """Embed the transcript verbatim into the fixed tutor instruction."""

    return "\n\n".join(
        [
            TUTOR_PERSONA,
            f'Transcript: "{transcript}"',
            RESPONSE_FORMAT,
            CLOSING_GUIDANCE,
        ]
    )


__all__ = [
    "CORRECTED_MARKER",
    "FEEDBACK_MARKER",
    "build_feedback_prompt",
]

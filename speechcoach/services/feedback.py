"""Tutor feedback generation backed by the conversational LLM."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .prompt_builder import build_feedback_prompt
from .response_contract import parse_feedback_response

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class FeedbackResult:
    """Feedback and corrected text derived from one LLM response."""

    feedback: str
    corrected_text: str
    raw_response: str


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class FeedbackService:
    """Ask the LLM for feedback on a transcript and parse its answer."""

    def __init__(self, llm_client: TextGenerator) -> None:
        self._llm_client = llm_client

    async def critique(self, transcript: str) -> FeedbackResult:
        """Return feedback plus corrected text; provider errors propagate."""

        prompt = build_feedback_prompt(transcript)
        raw_response = await self._llm_client.generate(prompt)
        logger.info("Raw LLM response: %s", _truncate(raw_response))

        sections = parse_feedback_response(raw_response, transcript)
        if not sections.feedback_found or not sections.corrected_found:
            logger.warning(
                "LLM response missing sections feedback=%s corrected=%s",
                sections.feedback_found,
                sections.corrected_found,
            )
        return FeedbackResult(
            feedback=sections.feedback,
            corrected_text=sections.corrected_text,
            raw_response=raw_response,
        )


__all__ = ["FeedbackResult", "FeedbackService", "TextGenerator"]

"""Thin Gemini client wrapper for text generation calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from speechcoach.config.settings import settings

from .errors import ErrorKind, UpstreamServiceError, kind_for_status

logger = logging.getLogger(__name__)


class LlmInvocationError(UpstreamServiceError):
    """Raised when the Gemini invocation fails."""


class GeminiLlmClient:
    """Invoke Gemini ``generateContent`` with standard configuration."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the first candidate's text."""

        body = {"contents": [{"parts": [{"text": prompt}]}]}
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        ) as client:
            try:
                # httpx timeouts are per phase; wait_for bounds the whole call.
                response = await asyncio.wait_for(
                    client.post(
                        f"/models/{self._model}:generateContent",
                        params={"key": self._api_key},
                        json=body,
                    ),
                    timeout=self._timeout,
                )
            except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
                raise LlmInvocationError(
                    f"Gemini request timed out after {self._timeout}s",
                    kind=ErrorKind.TIMEOUT,
                    provider="gemini",
                ) from exc
            except httpx.RequestError as exc:
                # The request URL carries the key, so only the type is surfaced.
                raise LlmInvocationError(
                    f"Failed to reach Gemini: {type(exc).__name__}",
                    provider="gemini",
                ) from exc

        if not response.is_success:
            raise LlmInvocationError(
                f"Gemini API error: {response.status_code}",
                kind=kind_for_status(response.status_code),
                provider="gemini",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise LlmInvocationError(
                "Gemini returned a non-JSON body",
                provider="gemini",
                status_code=response.status_code,
            ) from exc

        return _first_candidate_text(payload)


def _first_candidate_text(payload: Any) -> str:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        logger.warning("Gemini response carried no candidate text")
        return ""
    return text if isinstance(text, str) else ""


def build_llm_client() -> GeminiLlmClient:
    """Construct the client from application settings."""

    api_key = settings.gemini.api_key
    return GeminiLlmClient(
        api_key.get_secret_value() if api_key else "",
        model=settings.gemini.model,
        base_url=settings.gemini.base_url,
        timeout=settings.gemini.timeout_seconds,
    )


__all__ = ["GeminiLlmClient", "LlmInvocationError", "build_llm_client"]

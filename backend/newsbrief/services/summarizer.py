"""Gemini summarizer - turns news text into a one or two sentence summary."""

import asyncio
import logging
from typing import Any

import httpx

from newsbrief.config import Settings
from newsbrief.schemas.generation import GeneratedText, read_outcome
from newsbrief.services.errors import (
    HTTP_CLIENT_ERRORS,
    classify_generation_failure,
    map_generation_error,
    outcome_error,
)

logger = logging.getLogger(__name__)


def truncate_text(text: str, max_chars: int) -> str:
    """
    Cut text to at most ``max_chars`` characters.

    This is a plain character cap standing in for the model's token limit;
    it is not token-aware and may cut mid-word.
    """
    return text[:max_chars]


class GeminiSummarizer:
    """Summarizes text through the Gemini generateContent REST endpoint."""

    SUMMARY_PROMPT = (
        "Write a short summary of about 1-2 sentences in {language} "
        'of the following news text:\n\n"{text}"'
    )

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.model = settings.gemini_model
        self.endpoint = f"{settings.gemini_api_url}/{self.model}:generateContent"
        self.timeout = settings.summarizer_timeout_seconds
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": settings.gemini_api_key,
            },
        )

    def build_payload(self, text: str, language: str | None = None) -> dict[str, Any]:
        """Request body for a summary of ``text``."""
        prompt = self.SUMMARY_PROMPT.format(
            language=language or self.settings.summary_language,
            text=text,
        )
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "maxOutputTokens": self.settings.max_output_tokens,
                "topP": self.settings.top_p,
                "topK": self.settings.top_k,
            },
        }

    async def summarize(self, text: str, language: str | None = None) -> str:
        """
        Summarize a piece of news text.

        Args:
            text: Text to summarize, cut to the configured character cap
            language: Target language of the summary

        Returns:
            The stripped summary text

        Raises:
            UpstreamError: for any failure, classified by the error mapper
        """
        payload = self.build_payload(truncate_text(text, self.settings.max_input_chars), language)

        try:
            async with asyncio.timeout(self.timeout):
                response = await self.http_client.post(
                    self.endpoint, json=payload, timeout=self.timeout
                )
        except (*HTTP_CLIENT_ERRORS, TimeoutError) as e:
            raise map_generation_error(e, model=self.model) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            error = classify_generation_failure(
                response.status_code, body, model=self.model, reason=response.reason_phrase
            )
            logger.warning(
                "Gemini API returned %s: %s", response.status_code, error.message
            )
            raise error

        outcome = read_outcome(body)
        if isinstance(outcome, GeneratedText):
            return outcome.text

        logger.warning("Gemini API response had no usable text: %r", outcome)
        raise outcome_error(outcome)

    async def close(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()

"""Error taxonomy and the mapping from upstream failures onto it.

This is the only module that looks at raw upstream error shapes. Everything
else deals in ``NewsbriefError`` and its ``ErrorKind``.
"""

import json
from enum import Enum
from typing import Any

import httpx

from newsbrief.schemas.generation import (
    Empty,
    GenerationOutcome,
    Malformed,
    MaxTokensReached,
    SafetyBlocked,
    read_outcome,
)

GEMINI_API = "Gemini API"
NEWS_API = "News API"

# httpx raises some client-side failures outside the HTTPError hierarchy
HTTP_CLIENT_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, httpx.CookieConflict)


class ErrorKind(str, Enum):
    """Stable error vocabulary exposed to the HTTP layer."""

    CONTENT_BLOCKED = "content_blocked"
    OUTPUT_TRUNCATED = "output_truncated"
    EMPTY_RESPONSE = "empty_response"
    RATE_LIMITED = "rate_limited"
    MODEL_UNAVAILABLE = "model_unavailable"
    INVALID_REQUEST = "invalid_request"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_REJECTED = "upstream_rejected"
    UPSTREAM_UNKNOWN = "upstream_unknown"
    NO_ELIGIBLE_CONTENT = "no_eligible_content"


class NewsbriefError(Exception):
    """Base error carrying a kind and a message fit for display."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        api: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.api = api

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {self.message!r})"


class UpstreamError(NewsbriefError):
    """A call to the news or generative backend failed."""


class NoEligibleContentError(NewsbriefError):
    """No fetched article had a title and body text to summarize."""

    suggestion = "Try a different category or country"

    def __init__(self, total_results: int = 0) -> None:
        super().__init__(
            ErrorKind.NO_ELIGIBLE_CONTENT,
            "No articles with enough content to summarize",
            api=NEWS_API,
        )
        self.total_results = total_results


_HTTP_STATUS = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UPSTREAM_TIMEOUT: 504,
    ErrorKind.UPSTREAM_UNAVAILABLE: 503,
    ErrorKind.NO_ELIGIBLE_CONTENT: 404,
}


def http_status_for(error: NewsbriefError) -> int:
    """Status code to answer the downstream caller with."""
    if error.kind == ErrorKind.UPSTREAM_REJECTED and error.status_code:
        return error.status_code
    return _HTTP_STATUS.get(error.kind, 502)


def fallback_message(error: NewsbriefError) -> str:
    """Text placed in a fallback result's summary field."""
    return f"Failed to summarize: {error.message}"


def _gemini_message(body: Any) -> str | None:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _news_message(body: Any) -> str | None:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


# Generative backend


def outcome_error(outcome: GenerationOutcome) -> UpstreamError:
    """Error for a parsed generateContent outcome that carries no usable text."""
    if isinstance(outcome, SafetyBlocked):
        return UpstreamError(
            ErrorKind.CONTENT_BLOCKED,
            f"Summary blocked for safety reasons by Gemini API ({outcome.reason}).",
            api=GEMINI_API,
        )
    if isinstance(outcome, MaxTokensReached):
        return UpstreamError(
            ErrorKind.OUTPUT_TRUNCATED,
            "Summary exceeded the output token limit. "
            "Reduce maxOutputTokens or shorten the input.",
            api=GEMINI_API,
        )
    if isinstance(outcome, Empty):
        return UpstreamError(
            ErrorKind.EMPTY_RESPONSE,
            "No text content was generated by Gemini API.",
            api=GEMINI_API,
        )
    if isinstance(outcome, Malformed):
        return UpstreamError(
            ErrorKind.UPSTREAM_UNKNOWN,
            "Unexpected response format from Gemini API.",
            api=GEMINI_API,
        )
    raise TypeError(f"{outcome!r} is not a failed outcome")


def _content_signal(body: Any) -> UpstreamError | None:
    """Safety or length signal embedded in an error payload, if any."""
    if not isinstance(body, dict) or not ({"candidates", "promptFeedback"} & body.keys()):
        return None
    outcome = read_outcome(body)
    if isinstance(outcome, (SafetyBlocked, MaxTokensReached)):
        return outcome_error(outcome)
    return None


def classify_generation_failure(
    status: int,
    body: Any,
    *,
    model: str,
    reason: str | None = None,
) -> UpstreamError:
    """
    Classify a non-2xx generateContent response.

    Content-level signals in the body win over the status code, and the
    status code wins over the generic fallback.
    """
    signal = _content_signal(body)
    if signal is not None:
        signal.status_code = status
        return signal

    upstream = _gemini_message(body)
    if status == 429:
        kind, message = ErrorKind.RATE_LIMITED, "Gemini API quota exceeded. Try again later."
    elif status == 404:
        kind = ErrorKind.MODEL_UNAVAILABLE
        message = f"Model not found or not supported: {model}. Check the model name."
    elif status == 400:
        kind = ErrorKind.INVALID_REQUEST
        message = "Invalid request to Gemini API (Bad Request): " + (
            upstream or "check the request format or content."
        )
    else:
        kind = ErrorKind.UPSTREAM_UNKNOWN
        message = upstream or reason or "Error from Gemini API"
    return UpstreamError(kind, message, status_code=status, api=GEMINI_API)


def map_generation_error(exc: BaseException, *, model: str) -> NewsbriefError:
    """Translate an exception raised while calling the generative backend."""
    if isinstance(exc, NewsbriefError):
        return exc
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return UpstreamError(
            ErrorKind.UPSTREAM_TIMEOUT, "Connection to Gemini API timed out", api=GEMINI_API
        )
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_generation_failure(
            exc.response.status_code,
            _response_body(exc.response),
            model=model,
            reason=exc.response.reason_phrase,
        )
    if isinstance(exc, ValueError):
        return UpstreamError(
            ErrorKind.UPSTREAM_UNKNOWN,
            "Unexpected response format from Gemini API.",
            api=GEMINI_API,
        )
    return UpstreamError(
        ErrorKind.UPSTREAM_UNKNOWN,
        str(exc) or "Request to Gemini API failed.",
        api=GEMINI_API,
    )


# News backend


def classify_news_failure(status: int, body: Any, reason: str | None = None) -> UpstreamError:
    """Pass a non-2xx News API response through with its status preserved."""
    message = _news_message(body) or reason or "Error from News API"
    return UpstreamError(ErrorKind.UPSTREAM_REJECTED, message, status_code=status, api=NEWS_API)


def map_news_error(exc: BaseException) -> NewsbriefError:
    """Translate an exception raised while fetching headlines."""
    if isinstance(exc, NewsbriefError):
        return exc
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return UpstreamError(
            ErrorKind.UPSTREAM_TIMEOUT, "Connection to News API timed out", api=NEWS_API
        )
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_news_failure(
            exc.response.status_code,
            _response_body(exc.response),
            exc.response.reason_phrase,
        )
    if isinstance(exc, httpx.TransportError):
        return UpstreamError(
            ErrorKind.UPSTREAM_UNAVAILABLE, "Unable to connect to News API", api=NEWS_API
        )
    if isinstance(exc, ValueError):
        return UpstreamError(
            ErrorKind.UPSTREAM_UNKNOWN, "Unexpected response format from News API", api=NEWS_API
        )
    return UpstreamError(ErrorKind.UPSTREAM_UNKNOWN, str(exc) or "News API error", api=NEWS_API)

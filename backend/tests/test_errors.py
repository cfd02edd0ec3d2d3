"""Tests for the error taxonomy and upstream failure mapping."""

import httpx
import pytest

from newsbrief.schemas.generation import (
    Empty,
    GeneratedText,
    Malformed,
    MaxTokensReached,
    SafetyBlocked,
    read_outcome,
)
from newsbrief.services.errors import (
    ErrorKind,
    NoEligibleContentError,
    UpstreamError,
    classify_generation_failure,
    classify_news_failure,
    fallback_message,
    http_status_for,
    map_generation_error,
    map_news_error,
    outcome_error,
)

MODEL = "gemini-1.5-flash-latest"
NEWS_REQUEST = httpx.Request("GET", "https://newsapi.org/v2/top-headlines")


class TestReadOutcome:
    def test_text_is_stripped(self) -> None:
        payload = {"candidates": [{"content": {"parts": [{"text": "  Summary.\n"}]}}]}
        assert read_outcome(payload) == GeneratedText("Summary.")

    def test_text_wins_over_max_tokens(self) -> None:
        payload = {
            "candidates": [
                {"content": {"parts": [{"text": "Partial"}]}, "finishReason": "MAX_TOKENS"}
            ]
        }
        assert read_outcome(payload) == GeneratedText("Partial")

    def test_safety_finish_reason(self) -> None:
        payload = {"candidates": [{"finishReason": "SAFETY"}]}
        assert read_outcome(payload) == SafetyBlocked("SAFETY")

    def test_prompt_feedback_block(self) -> None:
        payload = {"promptFeedback": {"blockReason": "OTHER"}}
        assert read_outcome(payload) == SafetyBlocked("OTHER")

    def test_max_tokens_without_text(self) -> None:
        payload = {"candidates": [{"content": {"parts": []}, "finishReason": "MAX_TOKENS"}]}
        assert read_outcome(payload) == MaxTokensReached()

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"candidates": []},
            {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
            {"candidates": [{"content": {"parts": [{"text": "   "}]}, "finishReason": "STOP"}]},
            {"candidates": [{"content": {}}]},
        ],
    )
    def test_present_but_empty_is_empty(self, payload: dict) -> None:
        assert read_outcome(payload) == Empty()

    @pytest.mark.parametrize("payload", [None, [], "text", {"candidates": "nope"}])
    def test_differently_shaped_payload_is_malformed(self, payload: object) -> None:
        assert isinstance(read_outcome(payload), Malformed)


class TestOutcomeError:
    @pytest.mark.parametrize(
        ("outcome", "kind"),
        [
            (SafetyBlocked("SAFETY"), ErrorKind.CONTENT_BLOCKED),
            (MaxTokensReached(), ErrorKind.OUTPUT_TRUNCATED),
            (Empty(), ErrorKind.EMPTY_RESPONSE),
            (Malformed("bad"), ErrorKind.UPSTREAM_UNKNOWN),
        ],
    )
    def test_kinds(self, outcome: object, kind: ErrorKind) -> None:
        assert outcome_error(outcome).kind == kind

    def test_safety_message_mentions_safety(self) -> None:
        error = outcome_error(SafetyBlocked("SAFETY"))
        assert "safety" in error.message.lower()

    def test_generated_text_is_not_an_error(self) -> None:
        with pytest.raises(TypeError):
            outcome_error(GeneratedText("fine"))


class TestClassifyGenerationFailure:
    def test_rate_limited(self) -> None:
        error = classify_generation_failure(429, {"error": {"message": "quota"}}, model=MODEL)
        assert error.kind == ErrorKind.RATE_LIMITED
        assert "quota" in error.message.lower()
        assert error.status_code == 429

    def test_model_unavailable_names_model(self) -> None:
        error = classify_generation_failure(404, None, model=MODEL)
        assert error.kind == ErrorKind.MODEL_UNAVAILABLE
        assert MODEL in error.message

    def test_invalid_request_carries_upstream_message(self) -> None:
        body = {"error": {"code": 400, "message": "Invalid JSON payload"}}
        error = classify_generation_failure(400, body, model=MODEL)
        assert error.kind == ErrorKind.INVALID_REQUEST
        assert "Invalid JSON payload" in error.message

    def test_safety_signal_beats_status_code(self) -> None:
        body = {"error": {"message": "blocked"}, "promptFeedback": {"blockReason": "SAFETY"}}
        error = classify_generation_failure(400, body, model=MODEL)
        assert error.kind == ErrorKind.CONTENT_BLOCKED

    def test_max_tokens_signal_beats_status_code(self) -> None:
        body = {"candidates": [{"finishReason": "MAX_TOKENS"}]}
        error = classify_generation_failure(500, body, model=MODEL)
        assert error.kind == ErrorKind.OUTPUT_TRUNCATED

    def test_unknown_keeps_upstream_message_verbatim(self) -> None:
        body = {"error": {"message": "The service is currently unavailable."}}
        error = classify_generation_failure(503, body, model=MODEL)
        assert error.kind == ErrorKind.UPSTREAM_UNKNOWN
        assert error.message == "The service is currently unavailable."

    def test_unknown_falls_back_to_reason_phrase(self) -> None:
        error = classify_generation_failure(502, None, model=MODEL, reason="Bad Gateway")
        assert error.message == "Bad Gateway"


class TestMapGenerationError:
    def test_httpx_timeout(self) -> None:
        error = map_generation_error(httpx.ReadTimeout("slow"), model=MODEL)
        assert error.kind == ErrorKind.UPSTREAM_TIMEOUT

    def test_deadline_timeout(self) -> None:
        assert map_generation_error(TimeoutError(), model=MODEL).kind == ErrorKind.UPSTREAM_TIMEOUT

    def test_status_error(self) -> None:
        request = httpx.Request("POST", "https://generativelanguage.googleapis.com")
        response = httpx.Response(429, json={"error": {"message": "quota"}}, request=request)
        exc = httpx.HTTPStatusError("429", request=request, response=response)
        assert map_generation_error(exc, model=MODEL).kind == ErrorKind.RATE_LIMITED

    def test_connection_error_is_unknown_with_message(self) -> None:
        error = map_generation_error(httpx.ConnectError("connection refused"), model=MODEL)
        assert error.kind == ErrorKind.UPSTREAM_UNKNOWN
        assert error.message == "connection refused"

    def test_existing_error_passes_through(self) -> None:
        original = UpstreamError(ErrorKind.EMPTY_RESPONSE, "nothing")
        assert map_generation_error(original, model=MODEL) is original


class TestNewsErrors:
    def test_rejected_keeps_status_and_message(self) -> None:
        body = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid."}
        error = classify_news_failure(401, body, "Unauthorized")
        assert error.kind == ErrorKind.UPSTREAM_REJECTED
        assert error.status_code == 401
        assert error.message == "Your API key is invalid."
        assert http_status_for(error) == 401

    def test_status_error_without_json_uses_reason(self) -> None:
        response = httpx.Response(500, text="<html>oops</html>", request=NEWS_REQUEST)
        exc = httpx.HTTPStatusError("500", request=NEWS_REQUEST, response=response)
        error = map_news_error(exc)
        assert error.kind == ErrorKind.UPSTREAM_REJECTED
        assert error.message == "Internal Server Error"

    def test_timeout(self) -> None:
        error = map_news_error(httpx.ConnectTimeout("slow", request=NEWS_REQUEST))
        assert error.kind == ErrorKind.UPSTREAM_TIMEOUT
        assert http_status_for(error) == 504

    def test_unreachable(self) -> None:
        error = map_news_error(httpx.ConnectError("Name or service not known"))
        assert error.kind == ErrorKind.UPSTREAM_UNAVAILABLE
        assert http_status_for(error) == 503


def test_fallback_message_wraps_error_message() -> None:
    error = UpstreamError(ErrorKind.RATE_LIMITED, "Gemini API quota exceeded. Try again later.")
    assert fallback_message(error) == "Failed to summarize: Gemini API quota exceeded. Try again later."


def test_no_eligible_content_maps_to_404() -> None:
    error = NoEligibleContentError(total_results=7)
    assert error.kind == ErrorKind.NO_ELIGIBLE_CONTENT
    assert error.total_results == 7
    assert http_status_for(error) == 404

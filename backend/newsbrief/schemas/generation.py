"""Gemini generateContent payload shapes and the tagged outcome of a call."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

SAFETY = "SAFETY"
MAX_TOKENS = "MAX_TOKENS"


class Part(BaseModel):
    text: str | None = None


class Content(BaseModel):
    parts: list[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    """A single generated candidate."""

    model_config = ConfigDict(populate_by_name=True)

    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")

    @property
    def text(self) -> str | None:
        """Text of the first part, if the candidate carries one."""
        if self.content is None or not self.content.parts:
            return None
        return self.content.parts[0].text


class PromptFeedback(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    block_reason: str | None = Field(default=None, alias="blockReason")


class GenerateContentResponse(BaseModel):
    """Subset of the generateContent response the summarizer relies on."""

    model_config = ConfigDict(populate_by_name=True)

    candidates: list[Candidate] = Field(default_factory=list)
    prompt_feedback: PromptFeedback | None = Field(default=None, alias="promptFeedback")


@dataclass(frozen=True)
class GeneratedText:
    text: str


@dataclass(frozen=True)
class SafetyBlocked:
    reason: str


@dataclass(frozen=True)
class MaxTokensReached:
    pass


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Malformed:
    detail: str


GenerationOutcome = GeneratedText | SafetyBlocked | MaxTokensReached | Empty | Malformed


def read_outcome(payload: Any) -> GenerationOutcome:
    """
    Validate a generateContent payload and classify it.

    Text wins over the finish reason: a candidate that carries usable text is
    returned even when generation stopped at the token cap.
    """
    try:
        response = GenerateContentResponse.model_validate(payload)
    except ValidationError as e:
        return Malformed(str(e))

    if response.prompt_feedback and response.prompt_feedback.block_reason:
        return SafetyBlocked(response.prompt_feedback.block_reason)

    if not response.candidates:
        return Empty()

    candidate = response.candidates[0]
    text = candidate.text
    if text and text.strip():
        return GeneratedText(text.strip())

    if candidate.finish_reason == SAFETY:
        return SafetyBlocked(SAFETY)
    if candidate.finish_reason == MAX_TOKENS:
        return MaxTokensReached()
    return Empty()

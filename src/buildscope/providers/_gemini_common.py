"""Shared helpers for the Gemini REST API (request building + response parsing)."""

from __future__ import annotations

from typing import Any

from buildscope.errors import ProviderError
from buildscope.providers.base import ModelResponse


def build_request_body(
    prompt: str,
    temperature: float = 0.4,
    max_tokens: int = 4096,
) -> dict[str, object]:
    return {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        },
    }


def parse_candidate_text(parts: Any) -> list[str]:
    text_parts: list[str] = []
    if not isinstance(parts, list):
        return text_parts
    for part in parts:
        if not isinstance(part, dict) or bool(part.get("thought")):
            continue
        text = part.get("text")
        if isinstance(text, str) and text:
            text_parts.append(text)
    return text_parts


def parse_candidates(candidates: Any) -> ModelResponse:
    if not isinstance(candidates, list) or not candidates:
        raise ProviderError("gemini response missing candidates", retryable=False)
    first = candidates[0]
    if not isinstance(first, dict):
        raise ProviderError("gemini response candidate malformed", retryable=False)
    content = first.get("content")
    if not isinstance(content, dict):
        raise ProviderError("gemini response content missing", retryable=False)
    finish_reason = first.get("finishReason")
    return ModelResponse(
        text="".join(parse_candidate_text(content.get("parts", []))),
        finish_reason=finish_reason if isinstance(finish_reason, str) else "",
    )


def parse_response(payload: dict[str, Any]) -> ModelResponse:
    feedback = payload.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        raise ProviderError(f"gemini blocked prompt: {feedback['blockReason']}", retryable=False)
    return parse_candidates(payload.get("candidates"))

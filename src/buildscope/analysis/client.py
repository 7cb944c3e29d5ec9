"""Remote analysis client: prompt, call, extract, validate, fall back."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from buildscope.analysis.capabilities import ComputeCapabilities
from buildscope.analysis.fallbacks import (
    fallback_compilation_analysis,
    fallback_manifest_analysis,
    fallback_recipe_steps,
)
from buildscope.analysis.json_extract import extract_json
from buildscope.analysis.prompts import compilation_prompt, manifest_prompt, recipe_prompt
from buildscope.analysis.types import (
    AnalysisOutcome,
    CompilationAnalysisResult,
    ManifestAnalysisResult,
    RecipeStep,
)
from buildscope.errors import BuildScopeError, ResponseShapeError
from buildscope.providers.base import ModelProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_model_json(text: str, validate: Callable[[Any], Any] | None = None) -> Any:
    """Parse and optionally validate the JSON carried by a model response.

    The extracted fragment is tried first, then the raw text. A candidate that
    fails to parse or fails ``validate`` passes over to the next one, so a
    bare JSON array is still found when the brace span inside it parses to an
    object. The last shape error is raised when no candidate is accepted.
    """
    candidates: list[str] = []
    extracted = extract_json(text)
    if extracted is not None:
        candidates.append(extracted)
    raw = text.strip()
    if raw and raw not in candidates:
        candidates.append(raw)
    error = ResponseShapeError("response did not contain parseable JSON")
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
        if validate is None:
            return parsed
        try:
            return validate(parsed)
        except ResponseShapeError as exc:
            error = exc
    raise error


def validate_recipe(parsed: Any) -> list[RecipeStep]:
    if not isinstance(parsed, list):
        raise ResponseShapeError("recipe analysis is not a JSON array")
    return parsed


def validate_manifest(parsed: Any) -> ManifestAnalysisResult:
    if not isinstance(parsed, dict):
        raise ResponseShapeError("manifest analysis is not a JSON object")
    if not parsed.get("items") or not parsed.get("totalSize"):
        raise ResponseShapeError("manifest analysis missing items or totalSize")
    return parsed  # type: ignore[return-value]


def validate_compilation(parsed: Any) -> CompilationAnalysisResult:
    if not isinstance(parsed, dict):
        raise ResponseShapeError("compilation analysis is not a JSON object")
    if not parsed.get("totalEstimatedTime"):
        raise ResponseShapeError("compilation analysis missing totalEstimatedTime")
    return parsed  # type: ignore[return-value]


def _transport_reason(exc: Exception) -> str:
    # 429, 5xx and network failures from the provider are retryable
    reason = f"transport_error: {type(exc).__name__}"
    if isinstance(exc, BuildScopeError) and exc.retryable:
        reason += " (retryable)"
    return reason


class AnalysisClient:
    """Runs the three model-backed analyses.

    Every operation returns an ``AnalysisOutcome`` and never raises: a missing
    provider, a transport failure or an unusable response all yield the
    operation's static fallback dataset with a degraded status.
    """

    def __init__(self, provider: ModelProvider | None) -> None:
        self.provider = provider

    @property
    def available(self) -> bool:
        return self.provider is not None

    async def analyze_recipe(self, content: str) -> AnalysisOutcome[list[RecipeStep]]:
        return await self._run(
            "recipe",
            recipe_prompt(content),
            validate_recipe,
            fallback_recipe_steps,
        )

    async def analyze_manifest(self, content: str) -> AnalysisOutcome[ManifestAnalysisResult]:
        return await self._run(
            "manifest",
            manifest_prompt(content),
            validate_manifest,
            fallback_manifest_analysis,
        )

    async def analyze_compilation_profile(
        self,
        recipe: str,
        manifest: str,
        capabilities: ComputeCapabilities | None = None,
    ) -> AnalysisOutcome[CompilationAnalysisResult]:
        return await self._run(
            "compilation",
            compilation_prompt(recipe, manifest, capabilities or ComputeCapabilities()),
            validate_compilation,
            fallback_compilation_analysis,
        )

    async def _run(
        self,
        operation: str,
        prompt: str,
        validate: Callable[[Any], T],
        fallback: Callable[[], T],
    ) -> AnalysisOutcome[T]:
        if self.provider is None:
            return AnalysisOutcome(fallback(), status="unavailable", reason="provider_unavailable")
        try:
            response = await self.provider.generate_content(prompt)
        except Exception as exc:
            logger.warning(
                "%s analysis request failed, using fallback: %s: %s",
                operation,
                type(exc).__name__,
                exc,
            )
            return AnalysisOutcome(fallback(), status="fallback", reason=_transport_reason(exc))
        try:
            data = parse_model_json(response.text, validate)
        except ResponseShapeError as exc:
            logger.warning("%s analysis response unusable, using fallback: %s", operation, exc)
            return AnalysisOutcome(fallback(), status="fallback", reason=f"invalid_response: {exc}")
        logger.info(
            "%s analysis completed with model %s",
            operation,
            getattr(self.provider, "model", "unknown"),
        )
        return AnalysisOutcome(data)

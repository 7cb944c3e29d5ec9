"""Per-session aggregate of the latest result of each analysis kind."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from buildscope.analysis.types import (
    AnalysisOutcome,
    CompilationAnalysisResult,
    ManifestAnalysisResult,
    RecipeStep,
    SpeedTestResult,
)
from buildscope.errors import OperationInFlightError

Operation = Literal["recipe", "manifest", "compilation", "speed_test"]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def outcome_payload(outcome: AnalysisOutcome[Any]) -> dict[str, object]:
    return {"status": outcome.status, "reason": outcome.reason}


def recipe_payload(outcome: AnalysisOutcome[list[RecipeStep]]) -> dict[str, object]:
    return {**outcome_payload(outcome), "steps": outcome.data}


def manifest_payload(outcome: AnalysisOutcome[ManifestAnalysisResult]) -> dict[str, object]:
    # outcome fields win over same-named keys in the model output
    return {**outcome.data, **outcome_payload(outcome)}


def compilation_payload(
    outcome: AnalysisOutcome[CompilationAnalysisResult],
) -> dict[str, object]:
    return {**outcome_payload(outcome), "analysis": outcome.data}


@dataclass(slots=True)
class ResultsAggregate:
    recipe: AnalysisOutcome[list[RecipeStep]] | None = None
    manifest: AnalysisOutcome[ManifestAnalysisResult] | None = None
    compilation: AnalysisOutcome[CompilationAnalysisResult] | None = None
    speed_test: SpeedTestResult | None = None
    updated_at: str | None = None

    @property
    def total_size(self) -> str | None:
        if self.manifest is None:
            return None
        value = self.manifest.data.get("totalSize")
        return value if isinstance(value, str) else None

    def to_dict(self) -> dict[str, object]:
        return {
            "recipe": recipe_payload(self.recipe) if self.recipe else None,
            "manifest": manifest_payload(self.manifest) if self.manifest else None,
            "compilation": compilation_payload(self.compilation) if self.compilation else None,
            "speedTest": self.speed_test.to_dict() if self.speed_test else None,
            "updatedAt": self.updated_at,
        }


class ResultsStore:
    """In-memory session results with a per-operation in-flight guard.

    Each operation overwrites only its own field, so different operations of
    one session may run concurrently. A second run of the same operation while
    the first is still pending is rejected.
    """

    def __init__(self, max_sessions: int = 256) -> None:
        self._max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[str, ResultsAggregate] = OrderedDict()
        self._in_flight: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def get(self, session_id: str) -> ResultsAggregate:
        with self._lock:
            aggregate = self._sessions.get(session_id)
            if aggregate is None:
                aggregate = ResultsAggregate()
                self._sessions[session_id] = aggregate
                while len(self._sessions) > self._max_sessions:
                    self._sessions.popitem(last=False)
            else:
                self._sessions.move_to_end(session_id)
            return aggregate

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def is_in_flight(self, session_id: str, operation: Operation) -> bool:
        with self._lock:
            return (session_id, operation) in self._in_flight

    @contextmanager
    def in_flight(self, session_id: str, *operations: Operation) -> Iterator[ResultsAggregate]:
        keys = [(session_id, operation) for operation in operations]
        with self._lock:
            for key in keys:
                if key in self._in_flight:
                    raise OperationInFlightError(key[1])
            self._in_flight.update(keys)
        try:
            yield self.get(session_id)
        finally:
            with self._lock:
                self._in_flight.difference_update(keys)

    def record_recipe(
        self, session_id: str, outcome: AnalysisOutcome[list[RecipeStep]]
    ) -> ResultsAggregate:
        aggregate = self.get(session_id)
        aggregate.recipe = outcome
        aggregate.updated_at = _now()
        return aggregate

    def record_manifest(
        self, session_id: str, outcome: AnalysisOutcome[ManifestAnalysisResult]
    ) -> ResultsAggregate:
        aggregate = self.get(session_id)
        aggregate.manifest = outcome
        aggregate.updated_at = _now()
        return aggregate

    def record_compilation(
        self, session_id: str, outcome: AnalysisOutcome[CompilationAnalysisResult]
    ) -> ResultsAggregate:
        aggregate = self.get(session_id)
        aggregate.compilation = outcome
        aggregate.updated_at = _now()
        return aggregate

    def record_speed_test(self, session_id: str, result: SpeedTestResult) -> ResultsAggregate:
        aggregate = self.get(session_id)
        aggregate.speed_test = result
        aggregate.updated_at = _now()
        return aggregate

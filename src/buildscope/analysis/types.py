"""Analysis result contracts.

Genuine results are the model's parsed JSON kept verbatim, so the shapes below
are ``TypedDict`` views over plain dicts rather than classes that would
re-serialise (and possibly drop) keys the model returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, NotRequired, TypedDict, TypeVar

Tier = Literal["low", "medium", "high", "extreme"]
Architecture = Literal["x86_64", "arm64", "multi"]
Environment = Literal["local", "ci_cd", "cloud"]
OutcomeStatus = Literal["ok", "fallback", "unavailable"]

T = TypeVar("T")


class RecipeStep(TypedDict):
    instruction: str
    description: str
    impact: str
    buildTime: NotRequired[str]
    computeIntensity: NotRequired[Tier]


class DependencyInfo(TypedDict):
    name: str
    estimatedSize: str
    description: str
    compilationRequired: NotRequired[bool]
    buildTime: NotRequired[str]


class ManifestAnalysisResult(TypedDict):
    items: list[DependencyInfo]
    totalSize: str


class CompilationAnalysisResult(TypedDict):
    totalEstimatedTime: str
    bottlenecks: list[str]
    recommendations: list[str]
    parallelizable: bool


@dataclass(slots=True)
class AnalysisOutcome(Generic[T]):
    """Result of one analysis call: genuine data or a fallback substitute."""

    data: T
    status: OutcomeStatus = "ok"
    reason: str | None = None

    @property
    def degraded(self) -> bool:
        return self.status != "ok"


@dataclass(slots=True)
class SpeedTestResult:
    throughput_mbps: float
    simulated: bool = False
    elapsed_seconds: float | None = None
    estimated_download_time: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "throughputMbps": self.throughput_mbps,
            "simulated": self.simulated,
        }
        if self.elapsed_seconds is not None:
            payload["elapsedSeconds"] = self.elapsed_seconds
        if self.estimated_download_time is not None:
            payload["estimatedDownloadTime"] = self.estimated_download_time
        return payload

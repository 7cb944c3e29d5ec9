"""Analysis services and singleton accessors."""

from __future__ import annotations

from buildscope.analysis.client import AnalysisClient
from buildscope.analysis.results import ResultsStore
from buildscope.analysis.speed import SpeedEstimator
from buildscope.config import get_settings
from buildscope.providers.factory import build_provider

_analysis_client: AnalysisClient | None = None
_speed_estimator: SpeedEstimator | None = None
_results_store: ResultsStore | None = None


def get_analysis_client() -> AnalysisClient:
    global _analysis_client
    if _analysis_client is None:
        _analysis_client = AnalysisClient(build_provider(get_settings()))
    return _analysis_client


def get_speed_estimator() -> SpeedEstimator:
    global _speed_estimator
    if _speed_estimator is None:
        settings = get_settings()
        _speed_estimator = SpeedEstimator(
            url=settings.speed_test_url,
            size_bytes=settings.speed_test_bytes,
            timeout_seconds=float(settings.speed_test_timeout_seconds),
        )
    return _speed_estimator


def get_results_store() -> ResultsStore:
    global _results_store
    if _results_store is None:
        _results_store = ResultsStore()
    return _results_store


def reset_services() -> None:
    global _analysis_client, _speed_estimator, _results_store
    _analysis_client = None
    _speed_estimator = None
    _results_store = None


__all__ = [
    "AnalysisClient",
    "ResultsStore",
    "SpeedEstimator",
    "get_analysis_client",
    "get_results_store",
    "get_speed_estimator",
    "reset_services",
]

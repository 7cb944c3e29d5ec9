"""Health, readiness and metrics routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from buildscope.analysis import AnalysisClient, get_analysis_client

router = APIRouter(tags=["health"])

# Simple in-memory counters for /metrics
_metrics: dict[str, int] = {
    "analyses_total": 0,
    "analyses_ok": 0,
    "analyses_fallback": 0,
    "analyses_unavailable": 0,
    "speed_tests_total": 0,
    "speed_tests_simulated": 0,
}


def increment_metric(name: str, amount: int = 1) -> None:
    """Increment a named metric counter."""
    _metrics[name] = _metrics.get(name, 0) + amount


def record_outcome_metric(status: str) -> None:
    increment_metric("analyses_total")
    increment_metric(f"analyses_{status}")


def reset_metrics() -> None:
    for key in _metrics:
        _metrics[key] = 0


@router.get("/metrics")
async def metrics() -> JSONResponse:
    """Counters in JSON format."""
    return JSONResponse(content=dict(_metrics))


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    return {"ok": True}


@router.get("/readyz")
async def readyz(
    client: AnalysisClient = Depends(get_analysis_client),  # noqa: B008
) -> JSONResponse:
    provider = client.provider
    if provider is None:
        # no key configured: every analysis serves fallback data
        return JSONResponse(
            status_code=200,
            content={"ok": True, "provider": {"configured": False, "healthy": False}},
        )
    healthy = await provider.health_check()
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"ok": healthy, "provider": {"configured": True, "healthy": healthy}},
    )

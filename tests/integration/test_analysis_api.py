import json

import httpx
from fastapi.testclient import TestClient

from buildscope.analysis import (
    AnalysisClient,
    SpeedEstimator,
    get_analysis_client,
    get_results_store,
    get_speed_estimator,
)
from buildscope.analysis.fallbacks import (
    fallback_compilation_analysis,
    fallback_manifest_analysis,
    fallback_recipe_steps,
)
from buildscope.main import app
from buildscope.providers.base import ModelResponse

DOCKERFILE = "FROM python:3.12-slim\nWORKDIR /srv\nRUN pip install -r requirements.txt\n"
REQUIREMENTS = "fastapi==0.110.0\nnumpy==1.26.4\n"


class _RoutingProvider:
    """Answers each prompt kind with a canned JSON payload."""

    model = "gemini-test"

    def __init__(self) -> None:
        self.prompts: list[str] = []

    async def generate_content(self, prompt: str) -> ModelResponse:
        self.prompts.append(prompt)
        if prompt.startswith("Analyze this Dockerfile"):
            steps = [
                {"instruction": "FROM python:3.12-slim", "description": "base", "impact": "50MB"},
                {"instruction": "WORKDIR /srv", "description": "cwd", "impact": "none"},
            ]
            return ModelResponse(text=f"```json\n{json.dumps(steps)}\n```")
        if prompt.startswith("Analyze this requirements.txt"):
            payload = {
                "items": [
                    {"name": "fastapi==0.110.0", "estimatedSize": "0.1 MB", "description": "web"},
                    {"name": "numpy==1.26.4", "estimatedSize": "18.2 MB", "description": "math"},
                ],
                "totalSize": "120.0 MB",
            }
            return ModelResponse(text=json.dumps(payload))
        return ModelResponse(text="Sorry, I cannot estimate that.")

    async def health_check(self) -> bool:
        return True


def _fixed_estimator(elapsed: float) -> SpeedEstimator:
    ticks = iter([0.0, elapsed])
    return SpeedEstimator(
        "https://speed.test/bytes/1048576",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"x")),
        clock=lambda: next(ticks),
    )


def test_degraded_mode_returns_fallbacks() -> None:
    client = TestClient(app)
    recipe = client.post("/api/v1/analysis/recipe", json={"content": DOCKERFILE})
    manifest = client.post("/api/v1/analysis/manifest", json={"content": REQUIREMENTS})
    compilation = client.post("/api/v1/analysis/compilation", json={"recipe": DOCKERFILE})
    assert recipe.status_code == 200
    assert recipe.json() == {
        "status": "unavailable",
        "reason": "provider_unavailable",
        "steps": fallback_recipe_steps(),
    }
    assert manifest.json()["items"] == fallback_manifest_analysis()["items"]
    assert manifest.json()["totalSize"] == "51.0 MB"
    assert compilation.json()["analysis"] == fallback_compilation_analysis()
    assert compilation.json()["capabilities"]["architecture"] == "x86_64"


def test_files_upload_runs_both_analyses_and_aggregates() -> None:
    provider = _RoutingProvider()
    app.dependency_overrides[get_analysis_client] = lambda: AnalysisClient(provider)
    client = TestClient(app)
    response = client.post(
        "/api/v1/analysis/files",
        json={"recipe": DOCKERFILE, "manifest": REQUIREMENTS},
        headers={"X-Session-Id": "upload-1"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["recipe"]["status"] == "ok"
    assert [step["instruction"] for step in data["recipe"]["steps"]] == [
        "FROM python:3.12-slim",
        "WORKDIR /srv",
    ]
    assert data["manifest"]["status"] == "ok"
    assert data["manifest"]["totalSize"] == "120.0 MB"
    assert data["compilation"] is None
    assert len(provider.prompts) == 2

    other = client.get("/api/v1/analysis/results", headers={"X-Session-Id": "someone-else"})
    assert other.json()["recipe"] is None


def test_files_upload_with_only_manifest() -> None:
    client = TestClient(app)
    response = client.post("/api/v1/analysis/files", json={"manifest": REQUIREMENTS})
    assert response.status_code == 200
    assert response.json()["recipe"] is None
    assert response.json()["manifest"]["status"] == "unavailable"


def test_speed_test_uses_session_total_size() -> None:
    provider = _RoutingProvider()
    app.dependency_overrides[get_analysis_client] = lambda: AnalysisClient(provider)
    app.dependency_overrides[get_speed_estimator] = lambda: _fixed_estimator(0.8)
    client = TestClient(app)
    headers = {"X-Session-Id": "speed-1"}
    client.post("/api/v1/analysis/manifest", json={"content": REQUIREMENTS}, headers=headers)
    response = client.post("/api/v1/analysis/speed-test", headers=headers)
    assert response.status_code == 200
    assert response.json() == {
        "throughputMbps": 10.0,
        "simulated": False,
        "elapsedSeconds": 0.8,
        "estimatedDownloadTime": "1m 36s",
    }
    results = client.get("/api/v1/analysis/results", headers=headers).json()
    assert results["speedTest"]["estimatedDownloadTime"] == "1m 36s"
    assert results["manifest"]["totalSize"] == "120.0 MB"


def test_speed_test_with_explicit_total_size_and_fallback_manifest() -> None:
    app.dependency_overrides[get_speed_estimator] = lambda: _fixed_estimator(1.0)
    client = TestClient(app)
    client.post("/api/v1/analysis/manifest", json={"content": REQUIREMENTS})
    from_session = client.post("/api/v1/analysis/speed-test").json()
    assert from_session["throughputMbps"] == 8.0
    assert from_session["estimatedDownloadTime"] == "51 seconds"

    explicit = client.post("/api/v1/analysis/speed-test", json={"totalSize": "unknown"}).json()
    assert "estimatedDownloadTime" not in explicit


def test_speed_test_without_manifest_omits_estimate() -> None:
    app.dependency_overrides[get_speed_estimator] = lambda: _fixed_estimator(1.0)
    client = TestClient(app)
    response = client.post("/api/v1/analysis/speed-test", headers={"X-Session-Id": "fresh"})
    assert response.status_code == 200
    assert "estimatedDownloadTime" not in response.json()


def test_compilation_unusable_response_falls_back_silently() -> None:
    provider = _RoutingProvider()
    app.dependency_overrides[get_analysis_client] = lambda: AnalysisClient(provider)
    client = TestClient(app)
    response = client.post(
        "/api/v1/analysis/compilation",
        json={
            "recipe": DOCKERFILE,
            "manifest": REQUIREMENTS,
            "capabilities": {"cpu": "extreme", "architecture": "arm64"},
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "fallback"
    assert data["analysis"] == fallback_compilation_analysis()
    assert data["capabilities"] == {
        "cpu": "extreme",
        "memory": "medium",
        "architecture": "arm64",
        "environment": "local",
    }
    assert "16+ cores, server-grade" in provider.prompts[0]


def test_validation_errors() -> None:
    client = TestClient(app)
    assert client.post("/api/v1/analysis/recipe", json={"content": ""}).status_code == 422
    assert client.post("/api/v1/analysis/files", json={}).status_code == 422
    assert client.post("/api/v1/analysis/compilation", json={"recipe": " "}).status_code == 422
    bad_tier = client.post(
        "/api/v1/analysis/compilation",
        json={"recipe": DOCKERFILE, "capabilities": {"cpu": "quantum"}},
    )
    assert bad_tier.status_code == 422
    too_big = client.post("/api/v1/analysis/manifest", json={"content": "x" * 5001})
    assert too_big.status_code == 422


def test_concurrent_same_operation_is_rejected() -> None:
    client = TestClient(app)
    store = get_results_store()
    with store.in_flight("busy", "recipe"):
        response = client.post(
            "/api/v1/analysis/recipe",
            json={"content": DOCKERFILE},
            headers={"X-Session-Id": "busy"},
        )
        other_kind = client.post(
            "/api/v1/analysis/manifest",
            json={"content": REQUIREMENTS},
            headers={"X-Session-Id": "busy"},
        )
    assert response.status_code == 409
    assert response.json() == {"error": "operation already in flight", "operation": "recipe"}
    assert other_kind.status_code == 200


def test_clear_results() -> None:
    client = TestClient(app)
    headers = {"X-Session-Id": "to-clear"}
    client.post("/api/v1/analysis/recipe", json={"content": DOCKERFILE}, headers=headers)
    assert client.get("/api/v1/analysis/results", headers=headers).json()["recipe"] is not None
    assert client.delete("/api/v1/analysis/results", headers=headers).json() == {"ok": True}
    assert client.get("/api/v1/analysis/results", headers=headers).json()["recipe"] is None


def test_rate_limit(monkeypatch) -> None:
    from buildscope.config import get_settings

    monkeypatch.setenv("RATE_LIMIT_ANALYSES_PER_MINUTE", "2")
    get_settings.cache_clear()
    client = TestClient(app)
    codes = [
        client.post("/api/v1/analysis/recipe", json={"content": DOCKERFILE}).status_code
        for _ in range(3)
    ]
    assert codes == [200, 200, 429]


def test_capability_options() -> None:
    client = TestClient(app)
    data = client.get("/api/v1/capabilities/options").json()
    assert data["default"] == {
        "cpu": "medium",
        "memory": "medium",
        "architecture": "x86_64",
        "environment": "local",
    }
    assert {option["value"] for option in data["options"]["architecture"]} == {
        "x86_64",
        "arm64",
        "multi",
    }


def test_manifest_status_is_not_overridden_by_model_output() -> None:
    class _StatusEchoProvider(_RoutingProvider):
        async def generate_content(self, prompt: str) -> ModelResponse:
            payload = {
                "items": [{"name": "flask==3.0.0", "estimatedSize": "0.1 MB"}],
                "totalSize": "0.1 MB",
                "status": "fallback",
            }
            return ModelResponse(text=json.dumps(payload))

    app.dependency_overrides[get_analysis_client] = lambda: AnalysisClient(_StatusEchoProvider())
    client = TestClient(app)
    headers = {"X-Session-Id": "echo"}
    response = client.post(
        "/api/v1/analysis/manifest", json={"content": "flask==3.0.0"}, headers=headers
    )
    assert response.json()["status"] == "ok"
    assert response.json()["reason"] is None
    results = client.get("/api/v1/analysis/results", headers=headers).json()
    assert results["manifest"]["status"] == "ok"

"""Recipe, manifest, compilation and speed-test analysis routes."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from pydantic import AfterValidator, BaseModel, Field, model_validator
from slowapi import Limiter
from slowapi.util import get_remote_address

from buildscope.analysis import (
    AnalysisClient,
    ResultsStore,
    SpeedEstimator,
    get_analysis_client,
    get_results_store,
    get_speed_estimator,
)
from buildscope.analysis.capabilities import ComputeCapabilities
from buildscope.analysis.results import (
    Operation,
    compilation_payload,
    manifest_payload,
    recipe_payload,
)
from buildscope.config import get_settings
from buildscope.ids import normalize_session_id
from buildscope.logging import bind_context
from buildscope.routes.health import increment_metric, record_outcome_metric

router = APIRouter(prefix="/analysis", tags=["api-analysis"])
_limiter = Limiter(key_func=get_remote_address)


def _analysis_rate_limit() -> str:
    return f"{max(1, get_settings().rate_limit_analyses_per_minute)}/minute"


def _check_upload_size(value: str) -> str:
    limit = get_settings().max_upload_chars
    if len(value) > limit:
        raise ValueError(f"file content exceeds {limit} characters")
    return value


UploadText = Annotated[str, AfterValidator(_check_upload_size)]


def session_id_header(x_session_id: str | None = Header(default=None)) -> str:
    session_id = normalize_session_id(x_session_id)
    bind_context(session_id=session_id)
    return session_id


class FileContentInput(BaseModel):
    content: UploadText = Field(min_length=1)


class FilesInput(BaseModel):
    recipe: UploadText | None = None
    manifest: UploadText | None = None

    @model_validator(mode="after")
    def require_one_file(self) -> "FilesInput":
        if not (self.recipe or "").strip() and not (self.manifest or "").strip():
            raise ValueError("at least one of recipe or manifest is required")
        return self


class CompilationInput(BaseModel):
    recipe: UploadText = ""
    manifest: UploadText = ""
    capabilities: ComputeCapabilities = Field(default_factory=ComputeCapabilities)

    @model_validator(mode="after")
    def require_one_file(self) -> "CompilationInput":
        if not self.recipe.strip() and not self.manifest.strip():
            raise ValueError("at least one of recipe or manifest is required")
        return self


class SpeedTestInput(BaseModel):
    total_size: str | None = Field(default=None, alias="totalSize", max_length=64)


@router.post("/recipe")
@_limiter.limit(_analysis_rate_limit)
async def analyze_recipe(
    request: Request,
    body: FileContentInput,
    session_id: str = Depends(session_id_header),  # noqa: B008
    client: AnalysisClient = Depends(get_analysis_client),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, object]:
    del request
    with store.in_flight(session_id, "recipe"):
        outcome = await client.analyze_recipe(body.content)
        store.record_recipe(session_id, outcome)
    record_outcome_metric(outcome.status)
    return recipe_payload(outcome)


@router.post("/manifest")
@_limiter.limit(_analysis_rate_limit)
async def analyze_manifest(
    request: Request,
    body: FileContentInput,
    session_id: str = Depends(session_id_header),  # noqa: B008
    client: AnalysisClient = Depends(get_analysis_client),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, object]:
    del request
    with store.in_flight(session_id, "manifest"):
        outcome = await client.analyze_manifest(body.content)
        store.record_manifest(session_id, outcome)
    record_outcome_metric(outcome.status)
    return manifest_payload(outcome)


@router.post("/files")
@_limiter.limit(_analysis_rate_limit)
async def analyze_files(
    request: Request,
    body: FilesInput,
    session_id: str = Depends(session_id_header),  # noqa: B008
    client: AnalysisClient = Depends(get_analysis_client),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, object]:
    """Analyze whichever of the two files were uploaded, concurrently."""
    del request
    recipe = (body.recipe or "").strip()
    manifest = (body.manifest or "").strip()
    operations: list[Operation] = []
    if recipe:
        operations.append("recipe")
    if manifest:
        operations.append("manifest")
    with store.in_flight(session_id, *operations):
        recipe_outcome, manifest_outcome = await asyncio.gather(
            client.analyze_recipe(body.recipe or "") if recipe else _none(),
            client.analyze_manifest(body.manifest or "") if manifest else _none(),
        )
        if recipe_outcome is not None:
            store.record_recipe(session_id, recipe_outcome)
            record_outcome_metric(recipe_outcome.status)
        if manifest_outcome is not None:
            store.record_manifest(session_id, manifest_outcome)
            record_outcome_metric(manifest_outcome.status)
    return store.get(session_id).to_dict()


async def _none() -> None:
    return None


@router.post("/compilation")
@_limiter.limit(_analysis_rate_limit)
async def analyze_compilation(
    request: Request,
    body: CompilationInput,
    session_id: str = Depends(session_id_header),  # noqa: B008
    client: AnalysisClient = Depends(get_analysis_client),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, object]:
    del request
    with store.in_flight(session_id, "compilation"):
        outcome = await client.analyze_compilation_profile(
            body.recipe, body.manifest, body.capabilities
        )
        store.record_compilation(session_id, outcome)
    record_outcome_metric(outcome.status)
    return {**compilation_payload(outcome), "capabilities": body.capabilities.model_dump()}


@router.post("/speed-test")
@_limiter.limit(_analysis_rate_limit)
async def speed_test(
    request: Request,
    body: SpeedTestInput | None = None,
    session_id: str = Depends(session_id_header),  # noqa: B008
    estimator: SpeedEstimator = Depends(get_speed_estimator),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, object]:
    del request
    with store.in_flight(session_id, "speed_test") as aggregate:
        total_size = body.total_size if body and body.total_size else aggregate.total_size
        result = await estimator.measure_throughput(total_size)
        store.record_speed_test(session_id, result)
    increment_metric("speed_tests_total")
    if result.simulated:
        increment_metric("speed_tests_simulated")
    return result.to_dict()


@router.get("/results")
async def get_results(
    session_id: str = Depends(session_id_header),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, object]:
    return store.get(session_id).to_dict()


@router.delete("/results")
async def clear_results(
    session_id: str = Depends(session_id_header),  # noqa: B008
    store: ResultsStore = Depends(get_results_store),  # noqa: B008
) -> dict[str, bool]:
    store.clear(session_id)
    return {"ok": True}

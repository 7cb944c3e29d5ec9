"""Compute capability options for the configuration editor."""

from fastapi import APIRouter

from buildscope.analysis.capabilities import CAPABILITY_OPTIONS, ComputeCapabilities

router = APIRouter(prefix="/capabilities", tags=["api-capabilities"])


@router.get("/options")
async def capability_options() -> dict[str, object]:
    return {
        "options": CAPABILITY_OPTIONS,
        "default": ComputeCapabilities().model_dump(),
    }

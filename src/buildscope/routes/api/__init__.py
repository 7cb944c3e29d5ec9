"""API v1 router aggregation."""

from fastapi import APIRouter

from buildscope.routes.api import analysis, capabilities

router = APIRouter(prefix="/api/v1", tags=["api"])
router.include_router(analysis.router)
router.include_router(capabilities.router)

"""FastAPI entrypoint."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from buildscope.analysis import get_analysis_client
from buildscope.config import get_settings, validate_settings_for_env
from buildscope.errors import OperationInFlightError
from buildscope.ids import new_id
from buildscope.logging import bind_context, clear_context, configure_logging
from buildscope.routes.api import router as api_router
from buildscope.routes.health import router as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    validate_settings_for_env(settings)
    configure_logging(settings.log_level)
    client = get_analysis_client()
    logger.info(
        "BuildScope ready (provider=%s, model=%s)",
        "gemini" if client.available else "none",
        settings.gemini_model if client.available else "-",
    )
    yield


limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="BuildScope", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter


@app.middleware("http")
async def request_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    clear_context()
    request_id = request.headers.get("x-request-id") or new_id("req")
    bind_context(request_id=request_id, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        clear_context()
    response.headers["X-Request-Id"] = request_id
    return response


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"error": "rate limit exceeded", "detail": str(exc.detail)},
    )


@app.exception_handler(OperationInFlightError)
async def _in_flight_handler(request: Request, exc: OperationInFlightError) -> JSONResponse:
    logger.info("Rejected concurrent %s for %s", exc.operation, request.url.path)
    return JSONResponse(
        status_code=409,
        content={"error": "operation already in flight", "operation": exc.operation},
    )


settings = get_settings()
cors_origins = [item.strip() for item in settings.web_cors_origins.split(",") if item.strip()]
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
app.include_router(health_router)
app.include_router(api_router)

"""Structured logging shared by the API server and the CLI.

Modules log through ``logging.getLogger(__name__)``. Those records, uvicorn's
and httpx's all pass through the same structlog chain, so ``request_id`` and
``session_id`` bound with :func:`bind_context` land on every line written
while a request is handled.
"""

import logging
import os
import sys

import structlog

# third-party loggers that are chatty at INFO
_LOGGER_FLOORS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(level: str, json_output: bool | None = None) -> None:
    """Install one stderr handler on the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO.
        json_output: Render JSON lines. Defaults to on when APP_ENV is prod.
    """
    log_level = _resolve_level(level)
    if json_output is None:
        json_output = os.environ.get("APP_ENV", "dev") == "prod"

    shared = _shared_processors()
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
    for name, floor in _LOGGER_FLOORS.items():
        logging.getLogger(name).setLevel(max(log_level, floor))


def bind_context(**kwargs: object) -> None:
    """Attach request-scoped fields such as ``request_id`` or ``session_id``."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()

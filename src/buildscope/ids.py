"""Identifier helpers for request tracing and analysis sessions."""

from uuid import uuid4

DEFAULT_SESSION_ID = "default"


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:16]}"


def normalize_session_id(raw: str | None) -> str:
    value = (raw or "").strip()
    if not value or len(value) > 128:
        return DEFAULT_SESSION_ID
    return value

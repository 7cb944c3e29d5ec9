"""Application configuration contract."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from buildscope.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")

    gemini_api_key: str = Field(alias="GEMINI_API_KEY", default="")
    gemini_model: str = Field(alias="GEMINI_MODEL", default="gemini-2.0-flash")
    gemini_api_base_url: str = Field(
        alias="GEMINI_API_BASE_URL", default="https://generativelanguage.googleapis.com"
    )
    gemini_timeout_seconds: int = Field(alias="GEMINI_TIMEOUT_SECONDS", default=60)
    gemini_temperature: float = Field(alias="GEMINI_TEMPERATURE", default=0.4)
    gemini_max_output_tokens: int = Field(alias="GEMINI_MAX_OUTPUT_TOKENS", default=4096)

    speed_test_url: str = Field(
        alias="SPEED_TEST_URL", default="https://httpbin.org/bytes/1048576"
    )
    speed_test_bytes: int = Field(alias="SPEED_TEST_BYTES", default=1_048_576)
    speed_test_timeout_seconds: int = Field(alias="SPEED_TEST_TIMEOUT_SECONDS", default=30)

    max_upload_chars: int = Field(alias="MAX_UPLOAD_CHARS", default=200_000)
    rate_limit_analyses_per_minute: int = Field(
        alias="RATE_LIMIT_ANALYSES_PER_MINUTE", default=30
    )
    web_cors_origins: str = Field(alias="WEB_CORS_ORIGINS", default="http://localhost:5173")

    # Security: bind host defaults to loopback
    bind_host: str = Field(alias="BIND_HOST", default="127.0.0.1")
    bind_port: int = Field(alias="BIND_PORT", default=8000)


def validate_settings_for_env(settings: Settings) -> None:
    import logging as _logging
    import warnings

    _logger = _logging.getLogger(__name__)

    # Warn if binding to 0.0.0.0 in production
    if settings.app_env == "prod" and settings.bind_host == "0.0.0.0":
        msg = (
            "SECURITY WARNING: BIND_HOST=0.0.0.0 in production. "
            "This exposes the API to all network interfaces. "
            "Set BIND_HOST=127.0.0.1 and use a reverse proxy."
        )
        _logger.warning(msg)
        warnings.warn(msg, stacklevel=2)

    if settings.app_env != "prod":
        return

    missing: list[str] = []
    required_non_empty = {
        "GEMINI_MODEL": settings.gemini_model,
        "GEMINI_API_BASE_URL": settings.gemini_api_base_url,
        "SPEED_TEST_URL": settings.speed_test_url,
    }
    for key, value in required_non_empty.items():
        if not value.strip():
            missing.append(key)

    required_positive = {
        "GEMINI_TIMEOUT_SECONDS": settings.gemini_timeout_seconds,
        "GEMINI_MAX_OUTPUT_TOKENS": settings.gemini_max_output_tokens,
        "SPEED_TEST_BYTES": settings.speed_test_bytes,
        "SPEED_TEST_TIMEOUT_SECONDS": settings.speed_test_timeout_seconds,
        "MAX_UPLOAD_CHARS": settings.max_upload_chars,
        "RATE_LIMIT_ANALYSES_PER_MINUTE": settings.rate_limit_analyses_per_minute,
    }
    for key, number in required_positive.items():
        if number <= 0:
            missing.append(f"{key}(positive value required)")

    if settings.speed_test_url.strip() and not settings.speed_test_url.startswith("https://"):
        missing.append("SPEED_TEST_URL(https required)")

    if missing:
        keys = ", ".join(sorted(set(missing)))
        raise ConfigError(f"invalid production configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

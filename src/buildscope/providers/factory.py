"""Provider construction helpers."""

import logging

from buildscope.config import Settings
from buildscope.providers.base import ModelProvider
from buildscope.providers.gemini import GeminiProvider

logger = logging.getLogger(__name__)


def provider_configured(settings: Settings) -> bool:
    return bool(settings.gemini_api_key.strip())


def build_provider(settings: Settings) -> ModelProvider | None:
    """Return the configured provider, or None when no credential is available.

    A missing key is a permanent degraded mode: every analysis returns its
    fallback dataset. The warning is emitted here, once per construction,
    rather than on every call.
    """
    if not provider_configured(settings):
        logger.warning(
            "GEMINI_API_KEY is not set; analyses will return fallback demonstration data"
        )
        return None
    return GeminiProvider(
        model=settings.gemini_model,
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_api_base_url,
        timeout_seconds=float(settings.gemini_timeout_seconds),
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_output_tokens,
    )

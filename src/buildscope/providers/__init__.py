"""Language model provider adapters."""

from buildscope.providers.base import ModelProvider, ModelResponse
from buildscope.providers.factory import build_provider, provider_configured
from buildscope.providers.gemini import GeminiProvider

__all__ = [
    "GeminiProvider",
    "ModelProvider",
    "ModelResponse",
    "build_provider",
    "provider_configured",
]

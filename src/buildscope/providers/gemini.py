"""Gemini provider adapter using an API key against the Generative Language REST API."""

import json

import httpx

from buildscope.errors import ProviderError
from buildscope.providers._gemini_common import build_request_body, parse_response
from buildscope.providers.base import ModelResponse

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiProvider:
    def __init__(
        self,
        model: str,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 60.0,
        temperature: float = 0.4,
        max_tokens: int = 4096,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key.strip():
            raise ValueError("gemini api key is required")
        self.model = model
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self._api_key, "Content-Type": "application/json"}

    async def generate_content(self, prompt: str) -> ModelResponse:
        body = build_request_body(prompt, self._temperature, self._max_tokens)
        url = f"{self._base_url}/v1beta/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(url, headers=self._headers(), content=json.dumps(body))
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise ProviderError(
                f"gemini request failed ({status_code})",
                retryable=status_code == 429 or status_code >= 500,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"gemini request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("gemini response is not JSON", retryable=False) from exc
        if not isinstance(payload, dict):
            raise ProviderError("gemini response is not an object", retryable=False)
        return parse_response(payload)

    async def health_check(self) -> bool:
        url = f"{self._base_url}/v1beta/models/{self.model}"
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                response = await client.get(url, headers=self._headers())
            return response.status_code < 400
        except Exception:
            return False

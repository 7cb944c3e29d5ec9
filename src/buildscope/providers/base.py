"""Provider contracts."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True)
class ModelResponse:
    text: str
    finish_reason: str = ""


class ModelProvider(Protocol):
    model: str

    async def generate_content(self, prompt: str) -> ModelResponse: ...

    async def health_check(self) -> bool: ...

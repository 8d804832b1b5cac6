from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ProviderResponse:
    content: str
    input_tokens: int
    output_tokens: int
    model: str


class LLMProvider(ABC):
    @abstractmethod
    async def extract_text(
        self,
        *,
        model: str,
        data: bytes,
        mime_type: str,
        instruction: str,
        max_tokens: int,
        timeout: Optional[float],
    ) -> ProviderResponse:
        """Read text out of an image or document. Returns content + token usage."""

    @abstractmethod
    async def generate_structured(
        self,
        *,
        model: str,
        prompt: str,
        schema: Dict[str, Any],
        schema_name: str,
        temperature: float,
        max_tokens: int,
        timeout: Optional[float],
    ) -> ProviderResponse:
        """Generate a single JSON object constrained to `schema`."""

    @abstractmethod
    def estimate_cost(self, model: str, tokens_in: int, tokens_out: int) -> float:
        """Estimate cost in USD for a given model + token usage."""

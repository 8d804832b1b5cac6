"""Capability interfaces the gateways depend on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class LLMUsage:
    model: str
    tokens_in: int
    tokens_out: int
    cost_usd: float
    latency_ms: int
    provider: str = "google"


@dataclass
class LLMResponse:
    content: str
    usage: LLMUsage
    success: bool
    error: Optional[str] = None


class TextExtractionService(ABC):
    @abstractmethod
    async def extract(self, data: bytes, mime_type: str, *, instruction: str) -> LLMResponse:
        """Return the text found in an image or document."""


class FeatureAnalysisService(ABC):
    @abstractmethod
    async def generate(
        self,
        *,
        prompt: str,
        schema: Dict[str, Any],
        temperature: float,
    ) -> LLMResponse:
        """Return a raw JSON payload constrained to `schema`."""

from __future__ import annotations

from .base import LLMProvider, ProviderResponse
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider


PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GeminiProvider,
}


def detect_provider_from_model(model: str, *, default_provider: str = "google") -> str:
    """Infer provider from model name."""
    lower = (model or "").strip().lower()

    if lower.startswith("claude-"):
        return "anthropic"
    if lower.startswith("gemini-"):
        return "google"
    if lower.startswith(("gpt-", "o1-", "o3-", "o4-")):
        return "openai"

    return default_provider


__all__ = [
    "LLMProvider",
    "ProviderResponse",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "PROVIDERS",
    "detect_provider_from_model",
]

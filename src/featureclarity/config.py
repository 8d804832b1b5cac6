from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, confloat, conint, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import Limits
from .models import LLMProviderType

DEFAULT_MODELS = {
    "openai": {"extraction": "gpt-4o", "analysis": "gpt-4o"},
    "google": {"extraction": "gemini-2.5-flash", "analysis": "gemini-2.5-pro"},
    "anthropic": {
        "extraction": "claude-sonnet-4-5-20250929",
        "analysis": "claude-sonnet-4-5-20250929",
    },
}


class ClarityConfig(BaseSettings):
    """Configuration loaded from CLARITY_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLARITY_",
        env_file=".env.local",
        env_file_encoding="utf-8",
        frozen=True,
        extra="ignore",
    )

    llm_provider: LLMProviderType = Field(
        default="google",
        description="LLM provider used for extraction and analysis: openai, google, anthropic",
    )
    openai_api_key: SecretStr = Field(default="", description="OpenAI API key (llm_provider=openai)")
    google_api_key: SecretStr = Field(default="", description="Google AI API key (llm_provider=google)")
    anthropic_api_key: SecretStr = Field(
        default="", description="Anthropic API key (llm_provider=anthropic)"
    )

    # Empty means "provider default", see DEFAULT_MODELS.
    extraction_model: str = Field(default="")
    analysis_model: str = Field(default="")
    analysis_temperature: confloat(ge=0, le=1) = Field(default=0.2)
    max_output_tokens: conint(ge=256) = Field(default=8192)
    request_timeout_seconds: Optional[conint(ge=1)] = Field(
        default=None,
        description="Optional ceiling for a single provider call; unset leaves timing to the provider",
    )

    max_upload_bytes: conint(ge=1) = Field(default=Limits.MAX_UPLOAD_BYTES)
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _normalize_lowercase(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def api_key_for(self, provider: str) -> str:
        if provider == "openai":
            return self.openai_api_key.get_secret_value()
        if provider == "google":
            return self.google_api_key.get_secret_value()
        if provider == "anthropic":
            return self.anthropic_api_key.get_secret_value()
        return ""

    def resolved_extraction_model(self) -> str:
        return self.extraction_model or DEFAULT_MODELS[self.llm_provider]["extraction"]

    def resolved_analysis_model(self) -> str:
        return self.analysis_model or DEFAULT_MODELS[self.llm_provider]["analysis"]


@lru_cache
def get_settings() -> ClarityConfig:
    return ClarityConfig()

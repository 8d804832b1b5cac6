from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List, Optional

from ...config import ClarityConfig
from ...errors import ConfigError
from .providers import PROVIDERS, detect_provider_from_model
from .services import FeatureAnalysisService, LLMResponse, LLMUsage, TextExtractionService

ANALYSIS_SCHEMA_NAME = "feature_analysis"


class LLMClient(TextExtractionService, FeatureAnalysisService):
    """
    Provider-agnostic wrapper for the two external capabilities.

    One attempt per call; provider failures come back as unsuccessful
    LLMResponse objects so the gateways decide how to surface them. Keys are
    checked per call against the provider each model resolves to, so a
    client can be built before credentials are known to be complete.
    """

    def __init__(
        self,
        llm_provider: str = "google",
        *,
        openai_api_key: str = "",
        google_api_key: str = "",
        anthropic_api_key: str = "",
        extraction_model: str = "gemini-2.5-flash",
        analysis_model: str = "gemini-2.5-pro",
        max_output_tokens: int = 8192,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.llm_provider = llm_provider
        self.openai_api_key = openai_api_key
        self.google_api_key = google_api_key
        self.anthropic_api_key = anthropic_api_key
        self.extraction_model = extraction_model
        self.analysis_model = analysis_model
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout_seconds
        self._providers: dict[str, object] = {}

    @classmethod
    def from_config(cls, config: ClarityConfig) -> "LLMClient":
        return cls(
            llm_provider=config.llm_provider,
            openai_api_key=config.openai_api_key.get_secret_value(),
            google_api_key=config.google_api_key.get_secret_value(),
            anthropic_api_key=config.anthropic_api_key.get_secret_value(),
            extraction_model=config.resolved_extraction_model(),
            analysis_model=config.resolved_analysis_model(),
            max_output_tokens=config.max_output_tokens,
            timeout_seconds=config.request_timeout_seconds,
        )

    def provider_for(self, model: str) -> str:
        return detect_provider_from_model(model, default_provider=self.llm_provider)

    def missing_api_keys(self) -> List[str]:
        """Key names still needed by the providers the two configured models resolve to."""
        missing: List[str] = []
        for model in (self.extraction_model, self.analysis_model):
            name = f"{self.provider_for(model)}_api_key"
            if not getattr(self, name, "") and name not in missing:
                missing.append(name)
        return missing

    def _get_provider(self, provider_name: str):
        if provider_name in self._providers:
            return self._providers[provider_name]

        provider_cls = PROVIDERS.get(provider_name)
        if provider_cls is None:
            raise ConfigError(f"Unknown LLM provider: {provider_name}")
        api_key = getattr(self, f"{provider_name}_api_key", "")
        if not api_key:
            raise ConfigError(f"{provider_name}_api_key is required to call {provider_name} models")
        provider = provider_cls(api_key=api_key)

        self._providers[provider_name] = provider
        return provider

    async def extract(self, data: bytes, mime_type: str, *, instruction: str) -> LLMResponse:
        return await self._call(
            self.extraction_model,
            lambda provider: provider.extract_text(
                model=self.extraction_model,
                data=data,
                mime_type=mime_type,
                instruction=instruction,
                max_tokens=self.max_output_tokens,
                timeout=self.timeout,
            ),
        )

    async def generate(
        self,
        *,
        prompt: str,
        schema: Dict[str, Any],
        temperature: float,
    ) -> LLMResponse:
        return await self._call(
            self.analysis_model,
            lambda provider: provider.generate_structured(
                model=self.analysis_model,
                prompt=prompt,
                schema=schema,
                schema_name=ANALYSIS_SCHEMA_NAME,
                temperature=temperature,
                max_tokens=self.max_output_tokens,
                timeout=self.timeout,
            ),
        )

    async def _call(self, model: str, invoke) -> LLMResponse:
        """
        Run one provider call and fold provider exceptions into the response.

        A missing key or unknown provider raises ConfigError instead.
        """
        provider_name = self.provider_for(model)
        provider = self._get_provider(provider_name)
        start = time.time()
        try:
            response = await invoke(provider)
        except asyncio.TimeoutError:
            return self._failure(model, provider_name, start, f"Timeout after {self.timeout}s")
        except Exception as exc:
            return self._failure(model, provider_name, start, str(exc) or type(exc).__name__)

        latency_ms = int((time.time() - start) * 1000)
        input_tokens = int(getattr(response, "input_tokens", 0) or 0)
        output_tokens = int(getattr(response, "output_tokens", 0) or 0)
        return LLMResponse(
            content=getattr(response, "content", "") or "",
            usage=LLMUsage(
                model=model,
                tokens_in=input_tokens,
                tokens_out=output_tokens,
                cost_usd=provider.estimate_cost(model, input_tokens, output_tokens),
                latency_ms=latency_ms,
                provider=provider_name,
            ),
            success=True,
        )

    @staticmethod
    def _failure(model: str, provider_name: str, start: float, error: str) -> LLMResponse:
        latency_ms = int((time.time() - start) * 1000)
        return LLMResponse(
            content="",
            usage=LLMUsage(model, 0, 0, 0.0, latency_ms, provider=provider_name),
            success=False,
            error=error,
        )

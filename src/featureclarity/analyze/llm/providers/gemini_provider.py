from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from .base import LLMProvider, ProviderResponse


class GeminiProvider(LLMProvider):
    """Google Gemini provider (google-genai SDK)."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                from google import genai
            except Exception as exc:  # pragma: no cover
                raise RuntimeError(
                    "Install `google-genai` package to use Google provider"
                ) from exc
            self._client = genai.Client(api_key=self.api_key)
        return self._client

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
        contents = [
            {
                "role": "user",
                "parts": [
                    {"inline_data": {"data": data, "mime_type": mime_type}},
                    {"text": instruction},
                ],
            }
        ]
        return await self._generate(
            model=model,
            contents=contents,
            config={"max_output_tokens": max_tokens},
            timeout=timeout,
        )

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
        return await self._generate(
            model=model,
            contents=prompt,
            config={
                "response_mime_type": "application/json",
                "response_json_schema": schema,
                "temperature": temperature,
                "max_output_tokens": max_tokens,
            },
            timeout=timeout,
        )

    async def _generate(
        self,
        *,
        model: str,
        contents: Any,
        config: Dict[str, Any],
        timeout: Optional[float],
    ) -> ProviderResponse:
        # The google-genai SDK uses sync methods today in some versions; keep it awaitable.
        def _run():
            return self.client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )

        response = await asyncio.wait_for(asyncio.to_thread(_run), timeout=timeout)

        text = getattr(response, "text", "") or ""

        usage = getattr(response, "usage_metadata", None)
        input_tokens = 0
        output_tokens = 0
        if usage is not None:
            input_tokens = int(
                getattr(usage, "prompt_token_count", 0)
                or getattr(usage, "prompt_tokens", 0)
                or 0
            )
            output_tokens = int(
                getattr(usage, "candidates_token_count", 0)
                or getattr(usage, "response_token_count", 0)
                or 0
            )

        return ProviderResponse(
            content=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model,
        )

    def estimate_cost(self, model: str, tokens_in: int, tokens_out: int) -> float:
        pricing_per_million = {
            "gemini-2.5-pro": {"input": 1.25, "output": 10.0},
            "gemini-2.5-flash": {"input": 0.15, "output": 0.60},
        }
        rates = pricing_per_million.get(model, {"input": 1.25, "output": 10.0})
        return (tokens_in / 1_000_000 * rates["input"]) + (tokens_out / 1_000_000 * rates["output"])

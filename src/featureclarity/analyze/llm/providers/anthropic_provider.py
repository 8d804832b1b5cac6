from __future__ import annotations

import asyncio
import base64
import json
from typing import Any, Dict, List, Optional

from ....models import is_image_mime
from .base import LLMProvider, ProviderResponse


def _file_block(data: bytes, mime_type: str) -> Dict[str, Any]:
    if is_image_mime(mime_type):
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": mime_type,
                "data": base64.b64encode(data).decode("ascii"),
            },
        }
    if mime_type == "text/plain":
        return {
            "type": "document",
            "source": {
                "type": "text",
                "media_type": "text/plain",
                "data": data.decode("utf-8", errors="replace"),
            },
        }
    return {
        "type": "document",
        "source": {
            "type": "base64",
            "media_type": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
        },
    }


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider; structured output through a forced tool call."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                import anthropic
            except Exception as exc:  # pragma: no cover
                raise RuntimeError(
                    "Install `anthropic` package to use Anthropic provider"
                ) from exc
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
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
        response = await asyncio.wait_for(
            self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            _file_block(data, mime_type),
                            {"type": "text", "text": instruction},
                        ],
                    }
                ],
            ),
            timeout=timeout,
        )

        text = "".join(
            getattr(block, "text", "") or ""
            for block in self._blocks(response)
            if getattr(block, "type", "text") == "text"
        )
        return self._with_usage(response, text, model)

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
        response = await asyncio.wait_for(
            self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                tools=[
                    {
                        "name": schema_name,
                        "description": "Record the structured feature analysis.",
                        "input_schema": schema,
                    }
                ],
                tool_choice={"type": "tool", "name": schema_name},
                messages=[{"role": "user", "content": prompt}],
            ),
            timeout=timeout,
        )

        text = ""
        for block in self._blocks(response):
            if getattr(block, "type", "") == "tool_use":
                text = json.dumps(getattr(block, "input", None) or {}, ensure_ascii=False)
                break
        return self._with_usage(response, text, model)

    @staticmethod
    def _blocks(response: Any) -> List[Any]:
        return list(getattr(response, "content", None) or [])

    @staticmethod
    def _with_usage(response: Any, text: str, model: str) -> ProviderResponse:
        usage = getattr(response, "usage", None)
        input_tokens = int(getattr(usage, "input_tokens", 0) or 0) if usage else 0
        output_tokens = int(getattr(usage, "output_tokens", 0) or 0) if usage else 0

        return ProviderResponse(
            content=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model,
        )

    def estimate_cost(self, model: str, tokens_in: int, tokens_out: int) -> float:
        pricing_per_million = {
            "claude-opus-4-6": {"input": 15.0, "output": 75.0},
            "claude-sonnet-4-5-20250929": {"input": 3.0, "output": 15.0},
            "claude-haiku-4-5-20251001": {"input": 0.80, "output": 4.0},
        }
        rates = pricing_per_million.get(model, {"input": 3.0, "output": 15.0})
        return (tokens_in / 1_000_000 * rates["input"]) + (tokens_out / 1_000_000 * rates["output"])

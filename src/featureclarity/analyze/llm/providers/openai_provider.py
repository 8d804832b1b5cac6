from __future__ import annotations

import asyncio
import base64
from typing import Any, Callable, Dict, Optional

from ....constants import DOCX_MIME_TYPE
from ....models import is_image_mime
from .base import LLMProvider, ProviderResponse

_DOCUMENT_FILENAMES = {
    "application/pdf": "document.pdf",
    "text/plain": "document.txt",
    DOCX_MIME_TYPE: "document.docx",
}


def _data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class OpenAIProvider(LLMProvider):
    """OpenAI provider: Chat Completions for images and analysis, Responses API for documents."""

    def __init__(self, api_key: str, *, client_getter: Optional[Callable[[], Any]] = None) -> None:
        self.api_key = api_key
        self._client_getter = client_getter
        self._client = None

    @property
    def client(self):
        if self._client_getter is not None:
            return self._client_getter()
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self.api_key)
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
        if is_image_mime(mime_type):
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=model,
                    max_tokens=max_tokens,
                    messages=[
                        {
                            "role": "user",
                            "content": [
                                {"type": "image_url", "image_url": {"url": _data_url(data, mime_type)}},
                                {"type": "text", "text": instruction},
                            ],
                        }
                    ],
                ),
                timeout=timeout,
            )
            return self._from_chat_completion(response, model)

        response = await asyncio.wait_for(
            self.client.responses.create(
                model=model,
                max_output_tokens=max_tokens,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "input_file",
                                "filename": _DOCUMENT_FILENAMES.get(mime_type, "document.pdf"),
                                "file_data": _data_url(data, mime_type),
                            },
                            {"type": "input_text", "text": instruction},
                        ],
                    }
                ],
            ),
            timeout=timeout,
        )
        usage = getattr(response, "usage", None)
        input_tokens = int(getattr(usage, "input_tokens", 0) or 0) if usage else 0
        output_tokens = int(getattr(usage, "output_tokens", 0) or 0) if usage else 0
        return ProviderResponse(
            content=getattr(response, "output_text", "") or "",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model,
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
        response = await asyncio.wait_for(
            self.client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "strict": True, "schema": schema},
                },
                messages=[{"role": "user", "content": prompt}],
            ),
            timeout=timeout,
        )
        return self._from_chat_completion(response, model)

    @staticmethod
    def _from_chat_completion(response: Any, model: str) -> ProviderResponse:
        text = ""
        choices = getattr(response, "choices", None) or []
        if choices:
            message = getattr(choices[0], "message", None)
            text = getattr(message, "content", "") if message is not None else ""
            text = text or ""

        usage = getattr(response, "usage", None)
        input_tokens = int(getattr(usage, "prompt_tokens", 0) or 0) if usage else 0
        output_tokens = int(getattr(usage, "completion_tokens", 0) or 0) if usage else 0

        return ProviderResponse(
            content=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model,
        )

    def estimate_cost(self, model: str, tokens_in: int, tokens_out: int) -> float:
        pricing = {
            "gpt-4.1": {"input": 0.002, "output": 0.008},
            "gpt-4.1-mini": {"input": 0.0004, "output": 0.0016},
            "gpt-4o": {"input": 0.005, "output": 0.015},
            "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
        }
        rates = pricing.get(model, {"input": 0.005, "output": 0.015})
        return (tokens_in / 1000 * rates["input"]) + (tokens_out / 1000 * rates["output"])

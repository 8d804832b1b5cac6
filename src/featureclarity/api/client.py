from __future__ import annotations

import base64
import json
from typing import Any, Optional

import httpx

from ..errors import AnalysisFailure, ExtractionFailure
from ..logging import ClarityLogger
from ..models import AnalysisInput


class ClarityApiClient:
    """
    Client for the /api/extract and /api/analyze endpoints.

    Exposes the same extract/analyze contract as the gateways so an
    OrchestrationController can drive a remote server unchanged.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ClarityLogger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self._transport = transport
        self.logger = logger or ClarityLogger("api-client")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def extract(self, data: bytes, mime_type: str) -> str:
        payload = {
            "base64Data": base64.b64encode(data).decode("ascii"),
            "mimeType": mime_type,
        }
        try:
            async with self._client() as client:
                response = await client.post("/api/extract", json=payload)
        except httpx.HTTPError as exc:
            raise ExtractionFailure(f"Extraction request failed: {exc}") from exc

        body = self._json_body(response)
        if response.status_code != 200:
            raise ExtractionFailure(str(body.get("error") or "Extraction failed"))

        text = str(body.get("text") or "")
        if not text.strip():
            raise ExtractionFailure("No text could be extracted.")
        return text

    async def analyze(self, analysis_input: AnalysisInput) -> str:
        """Return the analysis body as JSON text, ready for SchemaContract.parse."""
        payload = {
            "featureText": analysis_input.combined_feature_text,
            "title": analysis_input.title,
            "context": analysis_input.context,
            "clarificationNotes": analysis_input.clarification_notes,
        }
        try:
            async with self._client() as client:
                response = await client.post("/api/analyze", json=payload)
        except httpx.HTTPError as exc:
            raise AnalysisFailure(f"Analysis request failed: {exc}") from exc

        if response.status_code != 200:
            body = self._json_body(response)
            raw = body.get("rawResponse")
            raise AnalysisFailure(
                str(body.get("error") or f"Analysis failed ({response.status_code})"),
                raw_payload=raw if isinstance(raw, str) else None,
            )

        if not response.text.strip():
            raise AnalysisFailure("The analysis service returned an empty response.")
        return response.text

    def _json_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            self.logger.warning(
                "api_non_json_body",
                status_code=response.status_code,
                url=str(response.request.url),
            )
            return {}
        return body if isinstance(body, dict) else {}

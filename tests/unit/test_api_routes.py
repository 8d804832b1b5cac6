from __future__ import annotations

import base64
import json

import pytest
from httpx import ASGITransport, AsyncClient

from featureclarity.api.dependencies import get_analysis_gateway, get_extraction_gateway
from featureclarity.api.main import create_app
from featureclarity.config import ClarityConfig, get_settings
from featureclarity.errors import AnalysisFailure, ExtractionFailure
from featureclarity.models import AnalysisInput


class DummyExtractionGateway:
    def __init__(self, text: str = "Extracted text", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    async def extract(self, data: bytes, mime_type: str) -> str:
        self.calls.append((data, mime_type))
        if self.error is not None:
            raise self.error
        return self.text


class DummyAnalysisGateway:
    def __init__(self, raw: str = "{}", error: Exception | None = None):
        self.raw = raw
        self.error = error
        self.inputs: list[AnalysisInput] = []

    async def analyze(self, analysis_input: AnalysisInput) -> str:
        self.inputs.append(analysis_input)
        if self.error is not None:
            raise self.error
        return self.raw


def _app(extraction=None, analysis=None, settings: ClarityConfig | None = None):
    settings = settings or ClarityConfig(google_api_key="g-test", max_upload_bytes=64)
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_extraction_gateway] = lambda: extraction or DummyExtractionGateway()
    app.dependency_overrides[get_analysis_gateway] = lambda: analysis or DummyAnalysisGateway()
    return app


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.mark.anyio
async def test_health_and_request_id() -> None:
    async with _client(_app()) as client:
        response = await client.get("/health", headers={"X-Request-ID": "req_fixed"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"] == "req_fixed"


@pytest.mark.anyio
async def test_ready_requires_provider_key() -> None:
    async with _client(_app()) as client:
        ready = await client.get("/ready")
    assert ready.status_code == 200
    assert ready.json()["provider"] == "google"

    async with _client(_app(settings=ClarityConfig(llm_provider="openai"))) as client:
        not_ready = await client.get("/ready")
    assert not_ready.status_code == 503
    assert not_ready.json() == {"error": "openai_api_key is not configured"}


@pytest.mark.anyio
async def test_extract_returns_text() -> None:
    gateway = DummyExtractionGateway("Checkout flow")
    async with _client(_app(extraction=gateway)) as client:
        response = await client.post(
            "/api/extract",
            json={"base64Data": _b64(b"png"), "mimeType": "image/png"},
        )

    assert response.status_code == 200
    assert response.json() == {"text": "Checkout flow"}
    assert gateway.calls == [(b"png", "image/png")]


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("body", "error"),
    [
        ({"mimeType": "image/png"}, "Missing base64Data or mimeType"),
        ({"base64Data": "cG5n"}, "Missing base64Data or mimeType"),
        ({"base64Data": "cG5n", "mimeType": "application/zip"}, "Unsupported file type: application/zip"),
        ({"base64Data": "not base64!!", "mimeType": "text/plain"}, "base64Data is not valid base64"),
    ],
)
async def test_extract_rejects_bad_input(body: dict, error: str) -> None:
    gateway = DummyExtractionGateway()
    async with _client(_app(extraction=gateway)) as client:
        response = await client.post("/api/extract", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": error}
    assert gateway.calls == []


@pytest.mark.anyio
async def test_extract_rejects_oversized_upload() -> None:
    async with _client(_app()) as client:
        response = await client.post(
            "/api/extract",
            json={"base64Data": _b64(b"x" * 65), "mimeType": "text/plain"},
        )

    assert response.status_code == 400
    assert "upload limit" in response.json()["error"]


@pytest.mark.anyio
async def test_extract_failure_is_500() -> None:
    gateway = DummyExtractionGateway(error=ExtractionFailure("No text could be extracted."))
    async with _client(_app(extraction=gateway)) as client:
        response = await client.post(
            "/api/extract",
            json={"base64Data": _b64(b"doc"), "mimeType": "application/pdf"},
        )

    assert response.status_code == 500
    assert response.json() == {"error": "No text could be extracted."}


@pytest.mark.anyio
async def test_analyze_returns_validated_result(analysis_payload: dict) -> None:
    gateway = DummyAnalysisGateway(json.dumps(analysis_payload))
    async with _client(_app(analysis=gateway)) as client:
        response = await client.post(
            "/api/analyze",
            json={
                "featureText": "Users reset passwords",
                "title": "Password reset",
                "context": "Consumer app",
                "clarificationNotes": "Links expire after 1 hour",
            },
        )

    assert response.status_code == 200
    assert response.json() == analysis_payload
    sent = gateway.inputs[0]
    assert sent.combined_feature_text == "Users reset passwords"
    assert sent.title == "Password reset"
    assert sent.clarification_notes == "Links expire after 1 hour"


@pytest.mark.anyio
@pytest.mark.parametrize("body", [{}, {"featureText": "   "}, {"title": "Only title"}])
async def test_analyze_requires_feature_text(body: dict) -> None:
    gateway = DummyAnalysisGateway()
    async with _client(_app(analysis=gateway)) as client:
        response = await client.post("/api/analyze", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing featureText"}
    assert gateway.inputs == []


@pytest.mark.anyio
async def test_analyze_malformed_payload_returns_raw_response() -> None:
    async with _client(_app(analysis=DummyAnalysisGateway("not json"))) as client:
        response = await client.post("/api/analyze", json={"featureText": "Bulk delete"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to parse JSON response from the analysis model."
    assert body["rawResponse"] == "not json"


@pytest.mark.anyio
async def test_analyze_failure_without_payload() -> None:
    gateway = DummyAnalysisGateway(error=AnalysisFailure("Timeout after 30s"))
    async with _client(_app(analysis=gateway)) as client:
        response = await client.post("/api/analyze", json={"featureText": "Bulk delete"})

    assert response.status_code == 500
    assert response.json() == {"error": "Timeout after 30s"}


def _app_without_key():
    settings = ClarityConfig(llm_provider="openai", openai_api_key="")
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.mark.anyio
async def test_missing_key_does_not_mask_bad_request() -> None:
    async with _client(_app_without_key()) as client:
        extract = await client.post("/api/extract", json={"mimeType": "image/png"})
        analyze = await client.post("/api/analyze", json={"title": "Only title"})

    assert extract.status_code == 400
    assert extract.json() == {"error": "Missing base64Data or mimeType"}
    assert analyze.status_code == 400
    assert analyze.json() == {"error": "Missing featureText"}


@pytest.mark.anyio
async def test_missing_key_on_valid_request_is_500() -> None:
    async with _client(_app_without_key()) as client:
        response = await client.post("/api/analyze", json={"featureText": "Bulk delete"})

    assert response.status_code == 500
    assert response.json() == {"error": "openai_api_key is required to call openai models"}


@pytest.mark.anyio
async def test_ready_checks_key_of_overridden_model_provider() -> None:
    settings = ClarityConfig(google_api_key="g-test", analysis_model="gpt-4o")
    async with _client(_app(settings=settings)) as client:
        response = await client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"error": "openai_api_key is not configured"}

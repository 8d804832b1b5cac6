from __future__ import annotations

import pytest
from pydantic import ValidationError

from featureclarity.config import ClarityConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "CLARITY_LLM_PROVIDER",
        "CLARITY_OPENAI_API_KEY",
        "CLARITY_GOOGLE_API_KEY",
        "CLARITY_ANTHROPIC_API_KEY",
        "CLARITY_EXTRACTION_MODEL",
        "CLARITY_ANALYSIS_MODEL",
        "CLARITY_REQUEST_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_config_loads_defaults_and_masks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLARITY_GOOGLE_API_KEY", "g_test_dummy")
    cfg = ClarityConfig()

    assert cfg.llm_provider == "google"
    assert cfg.analysis_temperature == 0.2
    assert cfg.request_timeout_seconds is None
    assert cfg.resolved_extraction_model() == "gemini-2.5-flash"
    assert cfg.resolved_analysis_model() == "gemini-2.5-pro"
    assert "g_test_dummy" not in repr(cfg)
    assert cfg.api_key_for("google") == "g_test_dummy"
    assert cfg.api_key_for("openai") == ""


def test_provider_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLARITY_LLM_PROVIDER", " OpenAI ")
    monkeypatch.setenv("CLARITY_OPENAI_API_KEY", "sk_test_dummy")
    cfg = ClarityConfig()

    assert cfg.llm_provider == "openai"
    assert cfg.resolved_analysis_model() == "gpt-4o"


def test_model_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLARITY_LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("CLARITY_ANALYSIS_MODEL", "claude-opus-4-1")
    cfg = ClarityConfig()

    assert cfg.resolved_analysis_model() == "claude-opus-4-1"
    assert cfg.resolved_extraction_model().startswith("claude-")


def test_unknown_provider_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLARITY_LLM_PROVIDER", "xai")

    with pytest.raises(ValidationError):
        ClarityConfig()


def test_temperature_out_of_range_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLARITY_ANALYSIS_TEMPERATURE", "1.5")

    with pytest.raises(ValidationError):
        ClarityConfig()


def test_config_is_frozen() -> None:
    cfg = ClarityConfig()

    with pytest.raises((TypeError, ValidationError)):
        cfg.llm_provider = "openai"

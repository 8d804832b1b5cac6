"""LLM capability wrappers."""

from .llm_client import ANALYSIS_SCHEMA_NAME, LLMClient
from .services import FeatureAnalysisService, LLMResponse, LLMUsage, TextExtractionService

__all__ = [
    "ANALYSIS_SCHEMA_NAME",
    "FeatureAnalysisService",
    "LLMClient",
    "LLMResponse",
    "LLMUsage",
    "TextExtractionService",
]

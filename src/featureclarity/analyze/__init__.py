"""Analysis pipeline: extraction, analysis, response contract, orchestration."""

from .analysis_gateway import AnalysisGateway
from .extraction_gateway import ExtractionGateway
from .orchestrator import OrchestrationController, merge_feature_text
from .prompt_builder import build_analysis_prompt, extraction_instruction
from .schema_contract import RESPONSE_SCHEMA, AnalysisResult, SchemaContract

__all__ = [
    "AnalysisGateway",
    "AnalysisResult",
    "ExtractionGateway",
    "OrchestrationController",
    "RESPONSE_SCHEMA",
    "SchemaContract",
    "build_analysis_prompt",
    "extraction_instruction",
    "merge_feature_text",
]

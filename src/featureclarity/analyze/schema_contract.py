from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..constants import ASSUMPTION_CATEGORIES, RISK_CATEGORIES
from ..errors import ParseError, ParseErrorKind

REQUIRED_FIELDS: Tuple[str, ...] = (
    "executiveSummary",
    "implicitAssumptions",
    "systemRiskScenarios",
    "predictedUxProblems",
    "nextActions",
)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImplicitAssumptions(_WireModel):
    behavioral: List[str] = Field(default_factory=list)
    technical: List[str] = Field(default_factory=list)
    business: List[str] = Field(default_factory=list)
    ux: List[str] = Field(default_factory=list)


class SystemRiskScenarios(_WireModel):
    failure_states: List[str] = Field(default_factory=list)
    permission_conflicts: List[str] = Field(default_factory=list)
    empty_data_scenarios: List[str] = Field(default_factory=list)
    concurrency_issues: List[str] = Field(default_factory=list)
    user_misuse_patterns: List[str] = Field(default_factory=list)


class PredictedUxProblem(_WireModel):
    problem: str = ""
    # Free text: values outside Low/Medium/High are kept as-is.
    severity: str = ""
    description: str = ""


class AnalysisResult(_WireModel):
    executive_summary: str
    implicit_assumptions: ImplicitAssumptions
    system_risk_scenarios: SystemRiskScenarios
    predicted_ux_problems: List[PredictedUxProblem]
    next_actions: List[str]


def _string_array(description: str = "") -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "array", "items": {"type": "string"}}
    if description:
        schema["description"] = description
    return schema


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


RESPONSE_SCHEMA: Dict[str, Any] = _object(
    {
        "executiveSummary": {
            "type": "string",
            "description": "A short summary of the feature's clarity and overall risk level.",
        },
        "implicitAssumptions": _object({name: _string_array() for name in ASSUMPTION_CATEGORIES}),
        "systemRiskScenarios": _object({name: _string_array() for name in RISK_CATEGORIES}),
        "predictedUxProblems": {
            "type": "array",
            "items": _object(
                {
                    "problem": {"type": "string"},
                    "severity": {"type": "string", "description": "Low, Medium, or High"},
                    "description": {"type": "string"},
                }
            ),
        },
        "nextActions": _string_array(),
    }
)


class SchemaContract:
    """Parse raw model output into an AnalysisResult."""

    schema = RESPONSE_SCHEMA
    required_fields = REQUIRED_FIELDS

    def parse(self, raw: str) -> AnalysisResult:
        """
        Parse a raw payload.

        Raises ParseError(MALFORMED_JSON) when the payload is not JSON and
        ParseError(SCHEMA_VIOLATION) when required keys are missing or have
        the wrong shape. The untouched payload rides on every error.
        """
        raw = raw if raw is not None else ""
        content = self._extract_json_content(raw)

        try:
            parsed = json.loads(content)
        except (json.JSONDecodeError, ValueError) as exc:
            raise ParseError(ParseErrorKind.MALFORMED_JSON, raw, detail=str(exc)) from exc

        if not isinstance(parsed, dict):
            raise ParseError(
                ParseErrorKind.SCHEMA_VIOLATION,
                raw,
                missing_fields=REQUIRED_FIELDS,
                detail=f"expected an object, got {type(parsed).__name__}",
            )

        missing = [name for name in REQUIRED_FIELDS if name not in parsed]
        if missing:
            raise ParseError(ParseErrorKind.SCHEMA_VIOLATION, raw, missing_fields=missing)

        try:
            return AnalysisResult.model_validate(parsed)
        except ValidationError as exc:
            raise ParseError(
                ParseErrorKind.SCHEMA_VIOLATION,
                raw,
                detail=self._summarize_validation_error(exc),
            ) from exc

    @staticmethod
    def dump(result: AnalysisResult) -> Dict[str, Any]:
        """Wire (camelCase) form of a result."""
        return result.model_dump(by_alias=True)

    def _extract_json_content(self, text: str) -> str:
        """Unwrap a fenced ```json block if the model added one."""
        match = re.search(r"```(?:json)?\s*\n(.*?)```", text, re.DOTALL)
        if match:
            return match.group(1).strip()
        return text.strip()

    @staticmethod
    def _summarize_validation_error(exc: ValidationError) -> str:
        parts = []
        for error in exc.errors()[:5]:
            location = ".".join(str(item) for item in error.get("loc", ()))
            parts.append(f"{location}: {error.get('msg', 'invalid')}")
        return "; ".join(parts)

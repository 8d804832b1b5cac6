from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence, Tuple

from .models import ErrorOrigin


class ClarityError(Exception):
    """Base exception for all feature clarity errors."""

    origin: ErrorOrigin = ErrorOrigin.ANALYSIS
    raw_payload: Optional[str] = None


class ConfigError(ClarityError):
    """Configuration validation failed."""


class InvalidRequestError(ClarityError):
    """Caller submitted something the controller cannot run."""


class ExtractionFailure(ClarityError):
    """Text extraction failed or produced nothing usable."""

    origin = ErrorOrigin.EXTRACTION

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class AnalysisFailure(ClarityError):
    """The analysis capability errored or returned no content."""

    def __init__(self, message: str, raw_payload: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw_payload = raw_payload


class ParseErrorKind(str, Enum):
    MALFORMED_JSON = "malformed_json"
    SCHEMA_VIOLATION = "schema_violation"


class ParseError(ClarityError):
    """Model output broke the structured response contract."""

    def __init__(
        self,
        kind: ParseErrorKind,
        raw_payload: str,
        missing_fields: Sequence[str] = (),
        detail: str = "",
    ) -> None:
        self.kind = kind
        self.raw_payload = raw_payload
        self.missing_fields: Tuple[str, ...] = tuple(missing_fields)
        self.detail = detail
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.kind == ParseErrorKind.MALFORMED_JSON:
            return "Failed to parse JSON response from the analysis model."
        if self.missing_fields:
            return "Analysis response is missing required fields: " + ", ".join(self.missing_fields)
        if self.detail:
            return f"Analysis response does not match the expected schema: {self.detail}"
        return "Analysis response does not match the expected schema."

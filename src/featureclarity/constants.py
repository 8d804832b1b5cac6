from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Severity levels shared by model output and derived metadata."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Likelihood(str, Enum):
    """Likelihood levels for derived metadata."""

    HIGH = "High"
    LOW = "Low"


DEFAULT_TITLE = "Untitled Feature"
DEFAULT_CONTEXT = "Not provided"
EXTRACTED_TEXT_SEPARATOR = "\n\n--- Extracted from file ---\n"

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOCUMENT_MIME_TYPES = frozenset({"application/pdf", "text/plain", DOCX_MIME_TYPE})


class Limits:
    """Shared hard limits."""

    MAX_UPLOAD_BYTES = 20_000_000  # 20MB
    TOP_CRITICAL_RISKS = 3
    MAX_AMBIGUITY_SCORE = 100
    MAX_REWORK_PROBABILITY = 95


ASSUMPTION_CATEGORIES = ("behavioral", "technical", "business", "ux")
RISK_CATEGORIES = (
    "failureStates",
    "permissionConflicts",
    "emptyDataScenarios",
    "concurrencyIssues",
    "userMisusePatterns",
)

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, List, Literal, Optional

from .constants import DOCUMENT_MIME_TYPES

if TYPE_CHECKING:
    from .analyze.schema_contract import AnalysisResult
    from .artifacts.enrichment import ClarityReport

LLMProviderType = Literal["openai", "google", "anthropic"]


class Phase(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    PRESENTING = "presenting"
    ERRORED = "errored"


class ErrorOrigin(str, Enum):
    EXTRACTION = "extraction"
    ANALYSIS = "analysis"


def is_image_mime(mime_type: str) -> bool:
    return (mime_type or "").strip().lower().startswith("image/")


def is_supported_upload(mime_type: str) -> bool:
    """Uploads accepted by the extraction boundary: images, PDF, plain text, .docx."""
    normalized = (mime_type or "").strip().lower()
    return is_image_mime(normalized) or normalized in DOCUMENT_MIME_TYPES


@dataclass(frozen=True)
class FileRef:
    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class FeatureRequest:
    """What the user submitted for one analysis."""

    title: str = ""
    context: str = ""
    feature_text: str = ""
    attached_file: Optional[FileRef] = None

    def is_submittable(self) -> bool:
        return bool(self.feature_text.strip()) or self.attached_file is not None

    def without_attachment(self) -> "FeatureRequest":
        return replace(self, attached_file=None)


@dataclass(frozen=True)
class AnalysisInput:
    combined_feature_text: str
    title: str = ""
    context: str = ""
    clarification_notes: Optional[str] = None


@dataclass(frozen=True)
class Attempt:
    """The last run the user triggered; retry replays it."""

    request: FeatureRequest
    clarification_notes: Optional[str] = None


@dataclass(frozen=True)
class ErrorRecord:
    message: str
    origin: ErrorOrigin
    raw_response: Optional[str] = None

    @property
    def is_extraction_error(self) -> bool:
        return self.origin == ErrorOrigin.EXTRACTION


@dataclass
class SessionState:
    """
    Mutable state for one user session.

    Owned by a single OrchestrationController; cleared on "new analysis".
    """

    phase: Phase = Phase.IDLE
    request: Optional[FeatureRequest] = None
    result: Optional["AnalysisResult"] = None
    report: Optional["ClarityReport"] = None
    extracted_text: Optional[str] = None
    combined_feature_text: Optional[str] = None
    last_error: Optional[ErrorRecord] = None
    last_attempt: Optional[Attempt] = None
    phase_history: List[Phase] = field(default_factory=lambda: [Phase.IDLE])

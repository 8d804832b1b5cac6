from __future__ import annotations

from typing import Optional, Protocol

from ..artifacts.enrichment import enrich
from ..constants import EXTRACTED_TEXT_SEPARATOR
from ..errors import ClarityError, ExtractionFailure, InvalidRequestError
from ..logging import ClarityLogger
from ..models import (
    AnalysisInput,
    Attempt,
    ErrorOrigin,
    ErrorRecord,
    FeatureRequest,
    Phase,
    SessionState,
)
from .schema_contract import SchemaContract


class Extractor(Protocol):
    async def extract(self, data: bytes, mime_type: str) -> str: ...


class Analyzer(Protocol):
    async def analyze(self, analysis_input: AnalysisInput) -> str: ...


def merge_feature_text(typed_text: str, extracted_text: str) -> str:
    """Typed text first, then the labelled extracted text; extracted alone when nothing was typed."""
    if typed_text.strip():
        return f"{typed_text}{EXTRACTED_TEXT_SEPARATOR}{extracted_text}"
    return extracted_text


class OrchestrationController:
    """
    State machine for one session: extraction -> analysis -> refinement.

    Phases: idle -> extracting? -> analyzing -> presenting, with errored
    reachable from extracting/analyzing and presenting -> analyzing for
    refinement. Every failure lands here and becomes an ErrorRecord; nothing
    is retried unless the caller asks.
    """

    def __init__(
        self,
        extraction: Extractor,
        analysis: Analyzer,
        logger: Optional[ClarityLogger] = None,
        schema_contract: Optional[SchemaContract] = None,
    ) -> None:
        self.extraction = extraction
        self.analysis = analysis
        self.logger = logger or ClarityLogger("session")
        self.schema_contract = schema_contract or SchemaContract()
        self.state = SessionState()

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def is_busy(self) -> bool:
        """True while an external call is in flight; callers gate their submit on this."""
        return self.state.phase in (Phase.EXTRACTING, Phase.ANALYZING)

    async def run(self, request: FeatureRequest) -> SessionState:
        """Start a first-pass analysis for `request`."""
        if not request.is_submittable():
            raise InvalidRequestError("Provide feature text or attach a file before running analysis.")

        self._clear_results()
        self.state.request = request
        return await self._attempt(Attempt(request=request))

    async def refine(self, clarification_notes: str) -> SessionState:
        """Re-run analysis with clarification notes; extraction is never repeated."""
        if self.state.request is None or self.state.result is None:
            raise InvalidRequestError("Nothing to refine; run an analysis first.")
        if not (clarification_notes or "").strip():
            raise InvalidRequestError("Enter clarification notes before refining.")

        return await self._attempt(
            Attempt(request=self.state.request, clarification_notes=clarification_notes)
        )

    async def retry(self) -> SessionState:
        """Replay the last attempt against the current request, notes included."""
        attempt = self.state.last_attempt
        request = self.state.request
        if request is None or attempt is None or not request.is_submittable():
            self._transition(Phase.IDLE)
            return self.state
        return await self._attempt(
            Attempt(request=request, clarification_notes=attempt.clarification_notes)
        )

    def reset(self) -> SessionState:
        """Start a new analysis: drop request, result and cached text."""
        self._log.info("session_reset")
        self._clear_results()
        self.state.request = None
        self.state.last_error = None
        self.state.last_attempt = None
        self._transition(Phase.IDLE)
        return self.state

    def discard_attachment(self) -> SessionState:
        """Go back to input without the file ("try another file" / "paste text instead")."""
        if self.state.request is not None:
            self.state.request = self.state.request.without_attachment()
        if self.state.last_attempt is not None and self.state.request is not None:
            self.state.last_attempt = Attempt(
                request=self.state.request,
                clarification_notes=self.state.last_attempt.clarification_notes,
            )
        # Cached text came from the discarded file.
        self.state.extracted_text = None
        self.state.combined_feature_text = None
        self.state.last_error = None
        self._transition(Phase.IDLE)
        return self.state

    @property
    def _log(self) -> ClarityLogger:
        return self.logger.bind(phase=self.state.phase.value)

    def _clear_results(self) -> None:
        self.state.result = None
        self.state.report = None
        self.state.extracted_text = None
        self.state.combined_feature_text = None

    async def _attempt(self, attempt: Attempt) -> SessionState:
        self.state.last_attempt = attempt
        self.state.last_error = None
        request = attempt.request
        notes = attempt.clarification_notes

        if request.attached_file is not None and not notes:
            feature_text = await self._extract_and_merge(request)
            if feature_text is None:
                return self.state
        elif notes:
            feature_text = self._refinement_text(request)
        else:
            feature_text = request.feature_text

        self.state.combined_feature_text = feature_text
        await self._analyze(
            AnalysisInput(
                combined_feature_text=feature_text,
                title=request.title,
                context=request.context,
                clarification_notes=notes,
            )
        )
        return self.state

    async def _extract_and_merge(self, request: FeatureRequest) -> Optional[str]:
        attached = request.attached_file
        self._transition(Phase.EXTRACTING)
        self._log.info(
            "attachment_received",
            filename=attached.filename,
            mime_type=attached.mime_type,
            size_bytes=attached.size_bytes,
        )
        try:
            with self._log.stage("extraction", mime_type=attached.mime_type):
                extracted = await self.extraction.extract(attached.data, attached.mime_type)
        except ClarityError as exc:
            self._fail(exc, ErrorOrigin.EXTRACTION)
            return None

        if not extracted.strip():
            self._fail(ExtractionFailure("No text could be extracted."), ErrorOrigin.EXTRACTION)
            return None

        self.state.extracted_text = extracted
        return merge_feature_text(request.feature_text, extracted)

    def _refinement_text(self, request: FeatureRequest) -> str:
        # A file attached after the first pass is ignored here; the cached text wins.
        if self.state.extracted_text:
            return self.state.extracted_text
        if self.state.combined_feature_text is not None:
            return self.state.combined_feature_text
        return request.feature_text

    async def _analyze(self, analysis_input: AnalysisInput) -> None:
        self._transition(Phase.ANALYZING)
        try:
            with self._log.stage("analysis", refinement=bool(analysis_input.clarification_notes)):
                raw = await self.analysis.analyze(analysis_input)
                result = self.schema_contract.parse(raw)
        except ClarityError as exc:
            self._fail(exc, ErrorOrigin.ANALYSIS)
            return

        self.state.result = result
        self.state.report = enrich(result)
        self._log.info(
            "analysis_presented",
            ux_problems=len(result.predicted_ux_problems),
            top_critical=len(self.state.report.top_critical_risks),
            ambiguity_score=self.state.report.ambiguity_score,
        )
        self._transition(Phase.PRESENTING)

    def _fail(self, exc: ClarityError, origin: ErrorOrigin) -> None:
        record = ErrorRecord(
            message=str(exc) or type(exc).__name__,
            origin=origin,
            raw_response=getattr(exc, "raw_payload", None),
        )
        self.state.last_error = record
        self._log.error(
            "session_error",
            origin=origin.value,
            error=record.message,
            has_raw_response=record.raw_response is not None,
        )
        self._transition(Phase.ERRORED)

    def _transition(self, phase: Phase) -> None:
        previous = self.state.phase
        self.state.phase = phase
        self.state.phase_history.append(phase)
        self.logger.info("phase_transition", from_phase=previous.value, phase=phase.value)

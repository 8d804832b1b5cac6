from __future__ import annotations

from typing import Optional

from ..errors import AnalysisFailure
from ..logging import ClarityLogger
from ..models import AnalysisInput
from .llm.services import FeatureAnalysisService
from .prompt_builder import build_analysis_prompt
from .schema_contract import RESPONSE_SCHEMA

DEFAULT_ANALYSIS_TEMPERATURE = 0.2


class AnalysisGateway:
    """Send feature text to the analysis capability and return its raw JSON payload."""

    def __init__(
        self,
        service: FeatureAnalysisService,
        logger: Optional[ClarityLogger] = None,
        temperature: float = DEFAULT_ANALYSIS_TEMPERATURE,
    ) -> None:
        self.service = service
        self.logger = logger or ClarityLogger("analysis")
        self.temperature = temperature

    async def analyze(self, analysis_input: AnalysisInput) -> str:
        prompt = build_analysis_prompt(analysis_input)
        self.logger.info(
            "analysis_start",
            prompt_chars=len(prompt),
            refinement=bool(analysis_input.clarification_notes),
        )

        response = await self.service.generate(
            prompt=prompt,
            schema=RESPONSE_SCHEMA,
            temperature=self.temperature,
        )

        if not response.success:
            message = response.error or "Analysis failed"
            self.logger.warning("analysis_failed", error=message)
            raise AnalysisFailure(message, raw_payload=response.content or None)

        if not (response.content or "").strip():
            self.logger.warning("analysis_failed", error="empty")
            raise AnalysisFailure("The analysis model returned an empty response.")

        self.logger.info(
            "analysis_complete",
            model=response.usage.model,
            provider=response.usage.provider,
            usage_in=response.usage.tokens_in,
            usage_out=response.usage.tokens_out,
            cost_usd=round(response.usage.cost_usd, 6),
            latency_ms=response.usage.latency_ms,
        )
        return response.content

from __future__ import annotations

from typing import Optional

from ..errors import ExtractionFailure
from ..logging import ClarityLogger
from ..models import is_image_mime
from .llm.services import TextExtractionService
from .prompt_builder import extraction_instruction


class ExtractionGateway:
    """Turn an uploaded file into plain text. One attempt, no retry."""

    def __init__(self, service: TextExtractionService, logger: Optional[ClarityLogger] = None) -> None:
        self.service = service
        self.logger = logger or ClarityLogger("extraction")

    async def extract(self, data: bytes, mime_type: str) -> str:
        """
        Extract text from `data`.

        Raises ExtractionFailure when the service errors, returns nothing,
        or returns only whitespace.
        """
        if not data:
            raise ExtractionFailure("No file content to extract from.")
        if not (mime_type or "").strip():
            raise ExtractionFailure("Missing file media type.")

        kind = "image" if is_image_mime(mime_type) else "document"
        self.logger.info(
            "extraction_start",
            mime_type=mime_type,
            kind=kind,
            size_bytes=len(data),
        )

        response = await self.service.extract(
            data,
            mime_type,
            instruction=extraction_instruction(mime_type),
        )

        if not response.success:
            reason = response.error or "Extraction failed"
            self.logger.warning("extraction_failed", kind=kind, error=reason)
            raise ExtractionFailure(reason)

        text = response.content or ""
        if not text.strip():
            self.logger.warning("extraction_failed", kind=kind, error="empty")
            raise ExtractionFailure("No text could be extracted.")

        self.logger.info(
            "extraction_complete",
            kind=kind,
            characters=len(text),
            model=response.usage.model,
            latency_ms=response.usage.latency_ms,
        )
        return text

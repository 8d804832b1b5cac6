from __future__ import annotations

from ..constants import DEFAULT_CONTEXT, DEFAULT_TITLE
from ..models import AnalysisInput, is_image_mime

_EXTRACTION_TEMPLATE = (
    "Extract all the text from this {kind} accurately. "
    "Preserve the structure as much as possible. Do not add any extra commentary."
)

IMAGE_EXTRACTION_INSTRUCTION = _EXTRACTION_TEMPLATE.format(kind="image")
DOCUMENT_EXTRACTION_INSTRUCTION = _EXTRACTION_TEMPLATE.format(kind="document")

ANALYSIS_PREAMBLE = (
    "Analyze the following feature description for UX clarity, implicit assumptions, "
    "structural risks, and likely UX failures."
)


def extraction_instruction(mime_type: str) -> str:
    """Pick the image or document instruction for a media type."""
    if is_image_mime(mime_type):
        return IMAGE_EXTRACTION_INSTRUCTION
    return DOCUMENT_EXTRACTION_INSTRUCTION


def build_analysis_prompt(analysis_input: AnalysisInput) -> str:
    """
    Build the analysis prompt.

    Order is fixed: title, product context, description, then the
    clarification notes block only when notes were given.
    """
    prompt = (
        f"{ANALYSIS_PREAMBLE}\n"
        "\n"
        f"Feature Title: {analysis_input.title or DEFAULT_TITLE}\n"
        f"Product Context: {analysis_input.context or DEFAULT_CONTEXT}\n"
        "\n"
        "Feature Description:\n"
        f"{analysis_input.combined_feature_text}\n"
    )

    if analysis_input.clarification_notes:
        prompt += (
            "\nClarification Notes from previous analysis:\n"
            f"{analysis_input.clarification_notes}\n"
        )

    return prompt

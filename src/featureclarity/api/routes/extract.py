import base64
import binascii
import logging

from fastapi import APIRouter, Depends, HTTPException

from ...analyze.extraction_gateway import ExtractionGateway
from ...config import ClarityConfig, get_settings
from ...models import is_supported_upload
from ..dependencies import get_extraction_gateway
from ..schemas import ErrorResponse, ExtractRequest, ExtractResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/extract",
    response_model=ExtractResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def extract(
    payload: ExtractRequest,
    settings: ClarityConfig = Depends(get_settings),
    gateway: ExtractionGateway = Depends(get_extraction_gateway),
):
    """
    Extract plain text from an uploaded image or document.

    The file arrives base64-encoded; images, PDF, plain text and .docx are accepted.
    """
    if not payload.base64_data or not payload.mime_type:
        raise HTTPException(status_code=400, detail="Missing base64Data or mimeType")

    if not is_supported_upload(payload.mime_type):
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {payload.mime_type}")

    try:
        data = base64.b64decode(payload.base64_data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="base64Data is not valid base64")

    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File exceeds the {settings.max_upload_bytes} byte upload limit",
        )

    text = await gateway.extract(data, payload.mime_type)
    logger.info("Extracted %d characters from %s", len(text), payload.mime_type)
    return ExtractResponse(text=text)

from fastapi import APIRouter, Depends, HTTPException

from ...analyze.llm import LLMClient
from ...config import ClarityConfig, get_settings

router = APIRouter()


@router.get("/health")
async def health():
    """Basic liveness check."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(settings: ClarityConfig = Depends(get_settings)):
    """
    Readiness check - every provider the configured models resolve to needs a key.

    Returns 503 otherwise; no provider call is made.
    """
    client = LLMClient.from_config(settings)
    missing = client.missing_api_keys()
    if missing:
        raise HTTPException(status_code=503, detail=f"{', '.join(missing)} is not configured")
    return {
        "status": "ready",
        "provider": settings.llm_provider,
        "extraction_model": client.extraction_model,
        "analysis_model": client.analysis_model,
    }

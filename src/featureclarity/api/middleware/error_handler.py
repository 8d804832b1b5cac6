import logging
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional

from ...errors import ClarityError

logger = logging.getLogger(__name__)


def _error_payload(message: str, raw_response: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": message}
    if raw_response is not None:
        payload["rawResponse"] = raw_response
    return payload


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Flatten HTTPException into the {error} body clients expect."""
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        return JSONResponse(status_code=exc.status_code, content=detail)
    return JSONResponse(status_code=exc.status_code, content=_error_payload(str(detail)))


async def clarity_error_handler(request: Request, exc: ClarityError) -> JSONResponse:
    """Extraction/analysis/contract failures: 500 with the raw model payload when there is one."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(
        "Request %s failed with %s: %s", request_id, type(exc).__name__, exc
    )
    return JSONResponse(
        status_code=500,
        content=_error_payload(str(exc) or "Request failed", getattr(exc, "raw_payload", None)),
    )

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ...logging import ClarityLogger


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and a ClarityLogger bound to it."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id
        request.state.logger = ClarityLogger(request_id, method=request.method, path=request.url.path)

        start = time.monotonic()
        response = await call_next(request)
        request.state.logger.info(
            "request_complete",
            status_code=response.status_code,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        response.headers["X-Request-ID"] = request_id
        return response

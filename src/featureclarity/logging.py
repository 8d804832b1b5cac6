from __future__ import annotations

import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from pydantic import SecretStr

_SENSITIVE_KEY_PARTS = ("token", "secret", "password", "api_key", "apikey")
REDACTED = "***"


class ClarityLogger:
    """
    JSON-lines logger for one session or HTTP request.

    Every line carries the session id plus any bound context, so a request id,
    route or controller phase set once shows up on every event below it:

        logger = ClarityLogger("req_ab12", path="/api/extract")
        logger.bind(phase="extracting").info("extraction_start", kind="image")
    """

    def __init__(self, session_id: str, **context: Any):
        self.session_id = session_id
        self.context: Dict[str, Any] = dict(context)

    def bind(self, **fields: Any) -> "ClarityLogger":
        """Child logger with `fields` added to the bound context."""
        return ClarityLogger(self.session_id, **{**self.context, **fields})

    def info(self, message: str, **fields: Any) -> None:
        self.log("info", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log("warning", message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log("error", message, **fields)

    @contextmanager
    def stage(self, name: str, **fields: Any) -> Iterator[None]:
        """Time a pipeline stage; one `stage_complete` or `stage_failed` line when it ends."""
        started = time.monotonic()
        self.info("stage_start", stage=name, **fields)
        try:
            yield
        except Exception as exc:
            self.error(
                "stage_failed",
                stage=name,
                duration_ms=_elapsed_ms(started),
                error_type=type(exc).__name__,
                error=str(exc),
                **fields,
            )
            raise
        self.info("stage_complete", stage=name, duration_ms=_elapsed_ms(started), **fields)

    def log(self, level: str, message: str, **fields: Any) -> None:
        record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "session_id": self.session_id,
            "message": message,
        }
        record.update(redact(self.context))
        record.update(redact(fields))
        sys.stderr.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        sys.stderr.flush()


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(part in lowered for part in _SENSITIVE_KEY_PARTS)


def redact(fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Mask credential-looking keys and SecretStr values, recursing into dicts."""
    clean: Dict[str, Any] = {}
    for key, value in (fields or {}).items():
        if is_sensitive_key(key) or isinstance(value, SecretStr):
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = redact(value)
        else:
            clean[key] = value
    return clean

"""Structured JSON logging utilities for intake pipeline tracing."""
from __future__ import annotations

import contextvars
import hashlib
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Literal, Mapping

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

_transcript_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "intake_transcript_id",
    default=None,
)

_level_map: dict[LogLevelName, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _get_logger() -> logging.Logger:
    logger = logging.getLogger("bite_intake.structured")
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def set_transcript_id(transcript_id: str | None) -> None:
    """Store the transcript id being processed in the current context."""
    _transcript_id_ctx.set(transcript_id)


def get_transcript_id() -> str | None:
    """Return the transcript id being processed in the current context."""
    return _transcript_id_ctx.get()


def clear_log_context() -> None:
    """Reset transcript tracing metadata for the current context."""
    set_transcript_id(None)


def transcript_fingerprint(text: str) -> dict[str, Any]:
    """Describe a transcript for logs without leaking its content."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return {"transcript_chars": len(text), "transcript_sha256_12": digest[:12]}


def _iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_event(
    *,
    component: str,
    event: str,
    level: LogLevelName = "INFO",
    transcript_id: str | None = None,
    details: Mapping[str, Any] | None = None,
) -> None:
    """Emit a structured JSON log line to stdout."""
    resolved_transcript_id = (
        transcript_id if transcript_id is not None else get_transcript_id()
    )
    payload: dict[str, Any] = {
        "ts": _iso_timestamp(),
        "level": level,
        "component": component,
        "event": event,
        "transcript_id": resolved_transcript_id,
        "details": dict(details or {}),
    }
    _get_logger().log(_level_map[level], json.dumps(payload, ensure_ascii=True, separators=(",", ":")))


def _duration_to_ms(duration_s: float) -> float:
    if duration_s < 0:
        return 0.0
    return round(duration_s * 1000.0, 3)


def log_latency_event(
    *,
    component: str,
    event: str,
    stage: str,
    duration_s: float,
    status: str,
    level: LogLevelName = "INFO",
    details: Mapping[str, Any] | None = None,
) -> None:
    """Emit a latency log event for one pipeline stage."""
    payload_details = dict(details or {})
    payload_details.update(
        {
            "stage": stage,
            "status": status,
            "duration_ms": _duration_to_ms(duration_s),
        }
    )
    log_event(
        component=component,
        event=event,
        level=level,
        details=payload_details,
    )

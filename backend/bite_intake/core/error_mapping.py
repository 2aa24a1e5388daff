"""Shared error code mapping for intake pipeline failures."""
from typing import Any

from .errors import ErrorKind, IntakeFailure

INTAKE_ERROR_CODE_MALFORMED_INPUT = "TRANSCRIPT_MALFORMED"
INTAKE_ERROR_CODE_CONTEXT_BUDGET = "LLM_CONTEXT_BUDGET_EXCEEDED"
INTAKE_ERROR_CODE_DECODE = "LLM_DECODE_FAILED"
INTAKE_ERROR_CODE_INVALID_JSON = "LLM_INVALID_JSON"
INTAKE_ERROR_CODE_SCHEMA_VIOLATION = "RECORD_SCHEMA_VIOLATION"
INTAKE_ERROR_CODE_TIMEOUT = "INTAKE_TIMED_OUT"
INTAKE_ERROR_CODE_GENERIC = "INTAKE_FAILED"


def classify_intake_error_code(failure: IntakeFailure) -> str:
    """Classify failure metadata into a stable error code."""
    if failure.kind is ErrorKind.MALFORMED_INPUT:
        return INTAKE_ERROR_CODE_MALFORMED_INPUT
    if failure.kind is ErrorKind.SCHEMA_VIOLATION:
        return INTAKE_ERROR_CODE_SCHEMA_VIOLATION
    if failure.kind is ErrorKind.TIMEOUT:
        return INTAKE_ERROR_CODE_TIMEOUT
    if failure.kind is ErrorKind.UNPARSEABLE_STRUCTURE:
        lowered_details = (failure.details or "").lower()
        if "context window" in lowered_details or "context budget" in lowered_details:
            return INTAKE_ERROR_CODE_CONTEXT_BUDGET
        if "llama_decode returned -1" in lowered_details or "decode" in lowered_details:
            return INTAKE_ERROR_CODE_DECODE
        return INTAKE_ERROR_CODE_INVALID_JSON
    return INTAKE_ERROR_CODE_GENERIC


def build_intake_error_payload(failure: IntakeFailure) -> dict[str, Any]:
    """Build standardized error payload from a pipeline failure."""
    payload: dict[str, Any] = {
        "code": classify_intake_error_code(failure),
        "kind": failure.kind.value,
        "message": failure.message,
    }
    if failure.details:
        payload["details"] = failure.details
    if failure.raw_output:
        payload["raw_output"] = failure.raw_output
    return payload

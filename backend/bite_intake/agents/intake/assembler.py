"""Merge extracted fields and the risk assessment into the output record."""
from __future__ import annotations

from pydantic import ValidationError

from ...core.errors import SchemaViolationError
from ...core.schemas import IntakeResult
from ...core.types import EMPTY_VALUE, RECORD_FIELDS
from .extraction import PartialIntakeRecord
from .risk_rules import RiskAssessment


def _format_validation_error(err: ValidationError) -> str:
    parts = []
    for issue in err.errors():
        location = ".".join(str(item) for item in issue.get("loc", ())) or "record"
        parts.append(f"{location}: {issue.get('msg', 'invalid value')}")
    return "; ".join(parts)


def assemble_record(partial: PartialIntakeRecord, assessment: RiskAssessment) -> IntakeResult:
    """
    Build the complete intake record.

    Every record key is present; unset fields become the empty string.
    Raises SchemaViolationError when the result does not validate.
    """
    payload: dict[str, object] = {}
    for key in RECORD_FIELDS:
        value = partial.fields.get(key, EMPTY_VALUE)
        payload[key] = EMPTY_VALUE if value is None else value
    payload["riskLevel"] = assessment.risk_level
    payload["triageCategory"] = assessment.triage_category
    payload["riskFlags"] = list(assessment.risk_flags)

    try:
        return IntakeResult(**payload)
    except ValidationError as err:
        raise SchemaViolationError(
            "Assembled intake record failed schema validation",
            details=_format_validation_error(err),
        ) from err

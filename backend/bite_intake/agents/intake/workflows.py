"""Generative (LLM-backed) intake extraction workflow."""

import json
from typing import Any

from ...config import IntakeSettings, get_settings
from ...core.errors import UnparseableStructureError
from ...core.logging_utils import log_event
from ...core.types import INCIDENT_FIELDS, RECORD_FIELDS, IntakeFields
from ...services.llm import BaseLLMModel, ExtractionModelError, ExtractionRequest
from .extraction import (
    PartialIntakeRecord,
    enforce_date_safety,
    extract_incident_fields,
    normalize_mobile,
    stated_dates,
)
from .incident import scan_incident
from .prompts import INTAKE_EXTRACTION_PROMPT
from .utils import extract_json_from_text

LLM_FIELDS: tuple[str, ...] = tuple(
    key for key in RECORD_FIELDS if key not in INCIDENT_FIELDS
)

INTAKE_EXTRACTION_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": list(LLM_FIELDS),
    "properties": {
        **{key: {"type": "string"} for key in LLM_FIELDS},
        "sex": {"type": "string", "enum": ["Male", "Female", ""]},
        "hasAllergies": {"type": "string", "enum": ["Yes", "No", ""]},
        "historyOfRabiesVaccine": {"type": "string", "enum": ["Yes", "No", ""]},
    },
}

_DATE_FIELDS = ("dateOfBirth", "lastVaccineDate")
_MOBILE_FIELDS = ("mobileNumber", "emergencyMobile")


def _sanitize_text(text: str) -> str:
    return text.replace("</s>", "").replace("<s>", "").strip()


def build_extraction_prompt(normalized_text: str) -> str:
    """Compose the extraction prompt around one normalized transcript."""
    return (
        f"{INTAKE_EXTRACTION_PROMPT}\n\n"
        f"TRANSCRIPT:\n{_sanitize_text(normalized_text)}\n\n"
        "JSON OUTPUT:"
    )


def parse_llm_fields(response_text: str, normalized_text: str, settings: IntakeSettings) -> IntakeFields:
    """
    Decode and sanitize model output into intake fields.

    Raises UnparseableStructureError when the output is not a JSON object of
    string values. Dates that differ from what the transcript states are dropped.
    """
    try:
        parsed = json.loads(extract_json_from_text(response_text))
    except json.JSONDecodeError as err:
        raise UnparseableStructureError(
            "Extraction output is not valid JSON",
            details=str(err),
            raw_output=response_text,
        ) from err
    if not isinstance(parsed, dict):
        raise UnparseableStructureError(
            "Extraction output is not a JSON object",
            details=f"got {type(parsed).__name__}",
            raw_output=response_text,
        )

    fields: IntakeFields = {}
    for key in LLM_FIELDS:
        value = parsed.get(key, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise UnparseableStructureError(
                f"Extraction output field '{key}' is not a string",
                details=f"{key}: {type(value).__name__}",
                raw_output=response_text,
            )
        fields[key] = value.strip()

    stated = stated_dates(normalized_text)
    for key in _DATE_FIELDS:
        fields[key] = enforce_date_safety(fields[key], stated[key])
    for key in _MOBILE_FIELDS:
        fields[key] = normalize_mobile(fields[key])
    if not fields["addressProvince"]:
        fields["addressProvince"] = settings.default_province
    return fields


class LLMFieldExtractor:
    """
    Field extractor that asks a local model for identity, address, contact
    and history fields. Incident fields are always filled by the
    deterministic scanner.
    """

    def __init__(self, llm: BaseLLMModel, max_new_tokens: int = 384) -> None:
        self.llm = llm
        self.max_new_tokens = max_new_tokens

    def extract(
        self,
        normalized_text: str,
        settings: IntakeSettings | None = None,
    ) -> PartialIntakeRecord:
        active_settings = settings or get_settings()
        request = ExtractionRequest(
            prompt=build_extraction_prompt(normalized_text),
            json_schema=INTAKE_EXTRACTION_JSON_SCHEMA,
            max_new_tokens=self.max_new_tokens,
        )
        try:
            response_text = self.llm.complete(request)
        except ExtractionModelError as err:
            raise UnparseableStructureError(
                "Extraction model failed to produce output",
                details=f"{err.reason}: {err}",
            ) from err

        log_event(
            component="extraction",
            event="llm_response_received",
            level="DEBUG",
            details={"response_chars": len(response_text)},
        )
        fields = parse_llm_fields(response_text, normalized_text, active_settings)
        findings = scan_incident(normalized_text)
        fields.update(extract_incident_fields(normalized_text, findings))
        return PartialIntakeRecord(fields=fields, incident=findings)

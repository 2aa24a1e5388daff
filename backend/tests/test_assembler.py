import pytest

from bite_intake.agents.intake.assembler import assemble_record
from bite_intake.agents.intake.extraction import PartialIntakeRecord
from bite_intake.agents.intake.risk_rules import RiskAssessment
from bite_intake.core.errors import ErrorKind, SchemaViolationError
from bite_intake.core.types import RECORD_FIELDS, RISK_FIELDS


def test_assemble_record_fills_every_key():
    record = assemble_record(
        PartialIntakeRecord(fields={"firstName": "Juan", "notAField": "ignored"}),
        RiskAssessment(risk_level="Low Risk", triage_category="Category I"),
    )
    data = record.model_dump()

    assert set(data) == set(RECORD_FIELDS) | set(RISK_FIELDS)
    assert data["firstName"] == "Juan"
    assert data["lastName"] == ""
    assert data["riskFlags"] == []


def test_assemble_record_keeps_flag_order():
    record = assemble_record(
        PartialIntakeRecord(),
        RiskAssessment(
            risk_level="High Risk",
            triage_category="Category III",
            risk_flags=("Neck bite detected", "Bat exposure"),
        ),
    )

    assert record.riskFlags == ["Neck bite detected", "Bat exposure"]


def test_mismatched_risk_pair_is_schema_violation():
    with pytest.raises(SchemaViolationError) as exc_info:
        assemble_record(
            PartialIntakeRecord(),
            RiskAssessment(risk_level="High Risk", triage_category="Category I", risk_flags=("x",)),
        )

    assert exc_info.value.kind is ErrorKind.SCHEMA_VIOLATION
    assert "Category III" in exc_info.value.details


def test_non_string_field_is_schema_violation():
    with pytest.raises(SchemaViolationError) as exc_info:
        assemble_record(
            PartialIntakeRecord(fields={"mobileNumber": 9171234567}),
            RiskAssessment(risk_level="Low Risk", triage_category="Category I"),
        )

    assert "mobileNumber" in exc_info.value.details


def test_flags_required_above_low_risk():
    with pytest.raises(SchemaViolationError):
        assemble_record(
            PartialIntakeRecord(),
            RiskAssessment(risk_level="Moderate Risk", triage_category="Category II"),
        )

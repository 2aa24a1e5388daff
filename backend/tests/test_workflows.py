import json

import pytest

from bite_intake.agents.intake.workflows import (
    INTAKE_EXTRACTION_JSON_SCHEMA,
    LLM_FIELDS,
    LLMFieldExtractor,
)
from bite_intake.config import IntakeSettings
from bite_intake.core.errors import ErrorKind, IntakeFailure, UnparseableStructureError
from bite_intake.core.types import INCIDENT_FIELDS
from bite_intake.pipelines import run_intake_pipeline
from bite_intake.services.llm import ModelDecodeError


class DummyLLM:
    def __init__(self, response: str):
        self.response = response
        self.last_request = None

    def complete(self, request):
        self.last_request = request
        return self.response


class FailingLLM:
    def complete(self, request):
        raise ModelDecodeError("llama_decode returned -1")


def test_schema_excludes_incident_fields():
    assert set(INTAKE_EXTRACTION_JSON_SCHEMA["required"]) == set(LLM_FIELDS)
    assert not set(LLM_FIELDS) & set(INCIDENT_FIELDS)


def test_llm_extractor_passes_schema_options():
    llm = DummyLLM('{"firstName": "Juan"}')

    LLMFieldExtractor(llm, max_new_tokens=128).extract("My name is Juan.", IntakeSettings())

    assert llm.last_request is not None
    assert "JSON OUTPUT:" in llm.last_request.prompt
    assert "My name is Juan." in llm.last_request.prompt
    assert llm.last_request.json_schema == INTAKE_EXTRACTION_JSON_SCHEMA
    assert llm.last_request.max_new_tokens == 128
    assert llm.last_request.temperature == 0.0


def test_llm_fields_are_sanitized_and_incident_comes_from_scanner():
    llm = DummyLLM(
        "```json\n"
        + json.dumps(
            {
                "firstName": "Juan",
                "lastName": "Dela Cruz",
                "dateOfBirth": "1990-03-05",
                "mobileNumber": "+63 917 123 4567",
                "addressProvince": "",
                "animalType": "Snake",
            }
        )
        + "\n```"
    )

    partial = LLMFieldExtractor(llm).extract(
        "My name is Juan Dela Cruz, born on the fifth. The cat scratched my arm.",
        IntakeSettings(),
    )

    assert partial.fields["firstName"] == "Juan"
    assert partial.fields["lastName"] == "Dela Cruz"
    assert partial.fields["dateOfBirth"] == ""
    assert partial.fields["mobileNumber"] == "09171234567"
    assert partial.fields["addressProvince"] == "Metro Manila"
    assert partial.fields["animalType"] == "Cat"
    assert partial.fields["typeOfExposure"] == "Scratch"
    assert partial.fields["bodyLocation"] == "Arm"
    assert partial.incident.exposures == ("Scratch",)


def test_llm_date_kept_when_month_is_stated():
    llm = DummyLLM('{"dateOfBirth": "1990-03-05"}')

    partial = LLMFieldExtractor(llm).extract("I was born on March 5, 1990.", IntakeSettings())

    assert partial.fields["dateOfBirth"] == "1990-03-05"


def test_llm_birth_date_dropped_when_only_the_incident_date_has_a_month():
    llm = DummyLLM('{"dateOfBirth": "2001-03-15"}')

    partial = LLMFieldExtractor(llm).extract(
        "I was born on the 15th, 2001. The dog bit me on March 3 2024.",
        IntakeSettings(),
    )

    assert partial.fields["dateOfBirth"] == ""
    assert partial.fields["dateOfIncident"] == "2024-03-03"


@pytest.mark.parametrize("response", ["not json", "[1, 2]", '{"firstName": 5}'])
def test_undecodable_output_raises_unparseable_structure(response: str):
    with pytest.raises(UnparseableStructureError) as exc_info:
        LLMFieldExtractor(DummyLLM(response)).extract("The dog bit me.", IntakeSettings())

    assert exc_info.value.raw_output == response


def test_generation_error_becomes_unparseable_structure():
    with pytest.raises(UnparseableStructureError) as exc_info:
        LLMFieldExtractor(FailingLLM()).extract("The dog bit me.", IntakeSettings())

    assert exc_info.value.details == "decode: llama_decode returned -1"


def test_pipeline_returns_failure_for_undecodable_output():
    result = run_intake_pipeline(
        "Kinagat ako ng aso.",
        settings=IntakeSettings(),
        extractor=LLMFieldExtractor(DummyLLM("I cannot answer that")),
    )

    assert isinstance(result, IntakeFailure)
    assert result.kind is ErrorKind.UNPARSEABLE_STRUCTURE
    assert result.raw_output == "I cannot answer that"

from contextlib import contextmanager
from io import StringIO
import json
import logging

from bite_intake.agents.intake.extraction import PartialIntakeRecord, RuleBasedExtractor
from bite_intake.config import IntakeSettings
from bite_intake.core.logging_utils import (
    clear_log_context,
    get_transcript_id,
    log_event,
    log_latency_event,
    set_transcript_id,
    transcript_fingerprint,
)
from bite_intake.pipelines import run_intake_pipeline


def _parse_log_lines(raw_output: str) -> list[dict]:
    lines = [line for line in raw_output.splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


@contextmanager
def _capture_structured_logs(level: int = logging.INFO):
    logger = logging.getLogger("bite_intake.structured")
    original_handlers = list(logger.handlers)
    original_level = logger.level
    original_propagate = logger.propagate

    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False
    try:
        yield buffer
    finally:
        handler.flush()
        logger.handlers = original_handlers
        logger.setLevel(original_level)
        logger.propagate = original_propagate


def test_log_event_schema_includes_required_fields():
    set_transcript_id("transcript-schema")

    with _capture_structured_logs() as buffer:
        log_event(component="test_component", event="test_event")
    parsed = _parse_log_lines(buffer.getvalue())
    assert parsed
    record = parsed[-1]

    assert "ts" in record
    assert record["level"] == "INFO"
    assert record["component"] == "test_component"
    assert record["event"] == "test_event"
    assert record["transcript_id"] == "transcript-schema"
    assert isinstance(record["details"], dict)

    clear_log_context()
    assert get_transcript_id() is None


def test_latency_event_reports_duration_in_ms():
    with _capture_structured_logs() as buffer:
        log_latency_event(
            component="pipeline",
            event="stage_completed",
            stage="normalize",
            duration_s=0.0125,
            status="ok",
        )
    record = _parse_log_lines(buffer.getvalue())[-1]

    assert record["details"]["stage"] == "normalize"
    assert record["details"]["status"] == "ok"
    assert record["details"]["duration_ms"] == 12.5


def test_transcript_fingerprint_hides_content():
    fingerprint = transcript_fingerprint("Kinagat ako ng aso")

    assert fingerprint["transcript_chars"] == len("Kinagat ako ng aso")
    assert len(fingerprint["transcript_sha256_12"]) == 12


def test_pipeline_logs_stages_without_transcript_text():
    transcript = "Ako si Rosario Villanueva. Kinagat ako ng aso sa binti."

    with _capture_structured_logs() as buffer:
        run_intake_pipeline(
            transcript,
            settings=IntakeSettings(),
            extractor=RuleBasedExtractor(),
            transcript_id="t-001",
        )
    raw = buffer.getvalue()
    parsed = _parse_log_lines(raw)
    events = [record["event"] for record in parsed]
    stages = [record["details"].get("stage") for record in parsed if record["event"] == "stage_completed"]

    assert "Villanueva" not in raw
    assert "Kinagat" not in raw
    assert events[0] == "transcript_received"
    assert events[-1] == "intake_completed"
    assert stages == ["normalize", "extract"]
    assert {record["transcript_id"] for record in parsed} == {"t-001"}
    assert get_transcript_id() is None


def test_schema_violation_is_logged_at_error_level():
    class BrokenExtractor:
        def extract(self, normalized_text, settings=None):
            return PartialIntakeRecord(fields={"sex": ["Male"]})

    with _capture_structured_logs() as buffer:
        run_intake_pipeline("The dog bit me.", settings=IntakeSettings(), extractor=BrokenExtractor())
    parsed = _parse_log_lines(buffer.getvalue())

    violations = [record for record in parsed if record["event"] == "schema_violation"]
    assert violations
    assert violations[0]["level"] == "ERROR"

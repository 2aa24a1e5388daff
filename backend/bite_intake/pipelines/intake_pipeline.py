"""Transcript -> intake record pipeline orchestration."""
from __future__ import annotations

import asyncio
import time
from typing import Sequence
from uuid import uuid4

from ..agents.intake import (
    assemble_record,
    classify,
    normalize,
)
from ..agents.intake.corrections import CorrectionTable
from ..agents.intake.extraction import FieldExtractor
from ..config import IntakeSettings, get_extractor, get_settings
from ..core.error_mapping import build_intake_error_payload
from ..core.errors import (
    ErrorKind,
    IntakeFailure,
    SchemaViolationError,
    UnparseableStructureError,
)
from ..core.logging_utils import (
    clear_log_context,
    log_event,
    log_latency_event,
    set_transcript_id,
    transcript_fingerprint,
)
from ..core.schemas import IntakeResponse, IntakeResult
from ..core.types import RawTranscript

IntakeOutcome = IntakeResult | IntakeFailure


def _malformed(transcript: object) -> IntakeFailure | None:
    if not isinstance(transcript, str):
        return IntakeFailure(
            kind=ErrorKind.MALFORMED_INPUT,
            message="Transcript must be text",
            details=f"got {type(transcript).__name__}",
        )
    if not transcript.strip():
        return IntakeFailure(
            kind=ErrorKind.MALFORMED_INPUT,
            message="Transcript is empty",
        )
    return None


def run_intake_pipeline(
    transcript: RawTranscript,
    *,
    settings: IntakeSettings | None = None,
    extractor: FieldExtractor | None = None,
    table: CorrectionTable | None = None,
    transcript_id: str | None = None,
) -> IntakeOutcome:
    """
    Full intake pipeline for one bite-center interview transcript:
    Transcript -> Normalizer -> Field Extractor -> Risk Classifier -> Assembler

    Missing data never fails the run; it resolves to empty fields. A failure
    value is returned (never raised) for malformed input, undecodable model
    output, or a record that does not conform to the output schema.

    :param transcript: Raw speech-to-text transcript
    :param settings: Pipeline settings; process-wide settings when omitted
    :param extractor: Field extractor; the configured backend when omitted
    :param table: Correction table; the shipped table when omitted
    :param transcript_id: Identifier attached to log lines for this run
    :return: IntakeResult on success, IntakeFailure otherwise
    """
    set_transcript_id(transcript_id or uuid4().hex[:12])
    try:
        malformed = _malformed(transcript)
        if malformed is not None:
            log_event(
                component="pipeline",
                event="transcript_rejected",
                level="WARNING",
                details={"kind": malformed.kind.value, "message": malformed.message},
            )
            return malformed

        active_settings = settings or get_settings()
        log_event(
            component="pipeline",
            event="transcript_received",
            details=transcript_fingerprint(transcript),
        )

        started = time.perf_counter()
        normalized = normalize(transcript, table)
        log_latency_event(
            component="pipeline",
            event="stage_completed",
            stage="normalize",
            duration_s=time.perf_counter() - started,
            status="ok",
        )

        started = time.perf_counter()
        active_extractor = extractor or get_extractor()
        try:
            partial = active_extractor.extract(normalized, active_settings)
        except UnparseableStructureError as err:
            failure = IntakeFailure.from_error(err)
            log_latency_event(
                component="pipeline",
                event="stage_completed",
                stage="extract",
                duration_s=time.perf_counter() - started,
                status="error",
                level="WARNING",
                details={"kind": failure.kind.value, "message": failure.message},
            )
            return failure
        log_latency_event(
            component="pipeline",
            event="stage_completed",
            stage="extract",
            duration_s=time.perf_counter() - started,
            status="ok",
            details={"resolved_fields": sum(1 for value in partial.fields.values() if value)},
        )

        assessment = classify(partial)
        try:
            record = assemble_record(partial, assessment)
        except SchemaViolationError as err:
            failure = IntakeFailure.from_error(err)
            log_event(
                component="pipeline",
                event="schema_violation",
                level="ERROR",
                details={"message": failure.message, "details": failure.details},
            )
            return failure

        log_event(
            component="pipeline",
            event="intake_completed",
            details={
                "risk_level": record.riskLevel,
                "triage_category": record.triageCategory,
                "risk_flag_count": len(record.riskFlags),
            },
        )
        return record
    finally:
        clear_log_context()


def build_intake_response(outcome: IntakeOutcome) -> IntakeResponse:
    """Wrap a pipeline outcome in the success/data/error envelope."""
    if isinstance(outcome, IntakeFailure):
        return IntakeResponse(success=False, error=build_intake_error_payload(outcome))
    return IntakeResponse(success=True, data=outcome.model_dump())


async def run_intake_pipeline_async(
    transcript: RawTranscript,
    *,
    settings: IntakeSettings | None = None,
    extractor: FieldExtractor | None = None,
    table: CorrectionTable | None = None,
    timeout_s: float | None = None,
) -> IntakeOutcome:
    """
    Run one pipeline invocation in a worker thread.

    With timeout_s set, a run that has not finished in time is returned as a
    Timeout failure. The worker thread itself is not interrupted.
    """
    call = asyncio.to_thread(
        run_intake_pipeline,
        transcript,
        settings=settings,
        extractor=extractor,
        table=table,
    )
    if timeout_s is None:
        return await call
    try:
        return await asyncio.wait_for(call, timeout=timeout_s)
    except asyncio.TimeoutError:
        log_event(
            component="pipeline",
            event="transcript_timed_out",
            level="WARNING",
            details={"timeout_s": timeout_s},
        )
        return IntakeFailure(
            kind=ErrorKind.TIMEOUT,
            message="Intake pipeline timed out",
            details=f"no result after {timeout_s}s",
        )


async def run_intake_batch(
    transcripts: Sequence[RawTranscript],
    timeout_s: float | None = None,
    *,
    settings: IntakeSettings | None = None,
    extractor: FieldExtractor | None = None,
    table: CorrectionTable | None = None,
) -> list[IntakeOutcome]:
    """
    Process independent transcripts concurrently; results keep input order.

    timeout_s applies per transcript and falls back to the configured
    INTAKE_BATCH_TIMEOUT_S.
    """
    active_settings = settings or get_settings()
    effective_timeout = timeout_s if timeout_s is not None else active_settings.batch_timeout_s
    started = time.perf_counter()
    outcomes = await asyncio.gather(
        *(
            run_intake_pipeline_async(
                transcript,
                settings=active_settings,
                extractor=extractor,
                table=table,
                timeout_s=effective_timeout,
            )
            for transcript in transcripts
        )
    )
    failures = sum(1 for outcome in outcomes if isinstance(outcome, IntakeFailure))
    log_latency_event(
        component="pipeline",
        event="batch_completed",
        stage="batch",
        duration_s=time.perf_counter() - started,
        status="ok" if failures == 0 else "partial",
        details={"transcripts": len(outcomes), "failures": failures},
    )
    return list(outcomes)

"""Failure kinds and exceptions raised inside the intake pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Typed failure kinds returned by the pipeline driver."""

    MALFORMED_INPUT = "MalformedInput"
    UNPARSEABLE_STRUCTURE = "UnparseableStructure"
    SCHEMA_VIOLATION = "SchemaViolation"
    TIMEOUT = "Timeout"


class IntakeError(RuntimeError):
    """Base error for intake pipeline failures."""

    kind: ErrorKind = ErrorKind.SCHEMA_VIOLATION

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


class SchemaViolationError(IntakeError):
    """Raised when an assembled record does not conform to the output schema."""

    kind = ErrorKind.SCHEMA_VIOLATION


class UnparseableStructureError(IntakeError):
    """Raised when generative extraction output cannot be decoded."""

    kind = ErrorKind.UNPARSEABLE_STRUCTURE

    def __init__(
        self,
        message: str,
        details: str | None = None,
        raw_output: str = "",
    ) -> None:
        super().__init__(message, details)
        self.raw_output = raw_output


@dataclass(frozen=True)
class IntakeFailure:
    """Explicit failure value returned instead of a partially shaped record."""

    kind: ErrorKind
    message: str
    details: str | None = None
    raw_output: str = ""
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, err: IntakeError) -> "IntakeFailure":
        return cls(
            kind=err.kind,
            message=str(err),
            details=err.details,
            raw_output=getattr(err, "raw_output", ""),
        )

"""Core types, schemas and failure values for the intake pipeline."""
from .errors import (
    ErrorKind,
    IntakeError,
    IntakeFailure,
    SchemaViolationError,
    UnparseableStructureError,
)
from .schemas import IntakeResponse, IntakeResult
from .types import RawTranscript, IntakeFields, RiskFlags

__all__ = [
    # Errors
    "ErrorKind",
    "IntakeError",
    "IntakeFailure",
    "SchemaViolationError",
    "UnparseableStructureError",
    # Schemas
    "IntakeResponse",
    "IntakeResult",
    # Types
    "RawTranscript",
    "IntakeFields",
    "RiskFlags",
]

"""
Bite Intake Package for Animal Bite Treatment Centers.

This package turns a speech-to-text transcript of a nurse-patient interview
into a structured intake record with a rabies exposure risk assessment:
- Phonetic normalization of Taglish speech-recognition errors
- Rule-based field extraction (optionally a local llama.cpp model)
- Deterministic WHO category triage
- Schema-validated record assembly

Main entry point:
    run_intake_pipeline: Transcript -> IntakeResult | IntakeFailure

Core components:
    - core: Output schemas, failure values and structured logging
    - agents: Normalizer, extractor, risk rules and assembler
    - services: Optional LLM extraction backend
    - pipelines: Pipeline orchestration and batch helpers
    - config: Settings and extractor factory
"""

# Main pipeline (primary public API)
from .pipelines import (
    build_intake_response,
    run_intake_batch,
    run_intake_pipeline,
    run_intake_pipeline_async,
)

# Core result types
from .core import ErrorKind, IntakeFailure, IntakeResponse, IntakeResult

# Configuration
from .config import IntakeSettings, get_extractor, get_settings

__all__ = [
    # Main pipeline
    "run_intake_pipeline",
    "run_intake_pipeline_async",
    "run_intake_batch",
    "build_intake_response",
    # Results
    "ErrorKind",
    "IntakeFailure",
    "IntakeResponse",
    "IntakeResult",
    # Config
    "IntakeSettings",
    "get_extractor",
    "get_settings",
]

__version__ = "1.0.0"

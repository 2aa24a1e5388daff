"""Pipeline orchestration modules."""
from .intake_pipeline import (
    build_intake_response,
    run_intake_batch,
    run_intake_pipeline,
    run_intake_pipeline_async,
)

__all__ = [
    "build_intake_response",
    "run_intake_batch",
    "run_intake_pipeline",
    "run_intake_pipeline_async",
]

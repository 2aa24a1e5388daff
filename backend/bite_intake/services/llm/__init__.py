"""Language Model service module."""
from .base import (
    BaseLLMModel,
    ContextBudgetExceededError,
    ExtractionModelError,
    ExtractionRequest,
    ModelDecodeError,
)
from .llamacpp import LlamaCppConfig, LlamaCppExtractionService

__all__ = [
    "BaseLLMModel",
    "ContextBudgetExceededError",
    "ExtractionModelError",
    "ExtractionRequest",
    "LlamaCppConfig",
    "LlamaCppExtractionService",
    "ModelDecodeError",
]

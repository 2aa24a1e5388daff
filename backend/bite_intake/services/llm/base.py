"""Contract between the intake extractor and a local language model."""
import abc
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class ExtractionRequest:
    """
    One structured-extraction call.

    The model is asked to fill json_schema from the prompt. Output is
    deterministic by default; max_new_tokens falls back to the backend's
    configured budget when unset.
    """

    prompt: str
    json_schema: Mapping[str, Any] | None = None
    max_new_tokens: int | None = None
    temperature: float = 0.0
    stop: tuple[str, ...] = ()


class ExtractionModelError(RuntimeError):
    """The model produced no usable completion."""

    reason = "backend"


class ContextBudgetExceededError(ExtractionModelError):
    """The transcript prompt leaves no room for output in the model context."""

    reason = "context_budget"

    def __init__(self, message: str, prompt_tokens: int | None = None, n_ctx: int | None = None):
        super().__init__(message)
        self.prompt_tokens = prompt_tokens
        self.n_ctx = n_ctx


class ModelDecodeError(ExtractionModelError):
    """The decoder failed while producing tokens."""

    reason = "decode"


def truncate_at_stop(text: str, stops: tuple[str, ...]) -> str:
    """Cut a completion at the earliest stop marker it contains."""
    cut = len(text)
    for marker in stops:
        index = text.find(marker) if marker else -1
        if 0 <= index < cut:
            cut = index
    return text[:cut].strip()


class BaseLLMModel(abc.ABC):
    """A local model able to answer an ExtractionRequest with JSON text."""

    @abc.abstractmethod
    def complete(self, request: ExtractionRequest) -> str:
        """
        Run one extraction completion.

        :param request: Prompt, target schema and output limits
        :return: Raw completion text, stop markers removed
        :raises ExtractionModelError: when no completion could be produced
        """

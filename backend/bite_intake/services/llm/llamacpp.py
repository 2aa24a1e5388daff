"""Intake field extraction on a local GGUF model through llama.cpp."""
from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass
from pathlib import Path

from .base import (
    BaseLLMModel,
    ContextBudgetExceededError,
    ExtractionModelError,
    ExtractionRequest,
    ModelDecodeError,
    truncate_at_stop,
)

# The extraction prompt ends with "JSON OUTPUT:"; anything after the object is noise.
EXTRACTION_STOPS = ("</json>", "\nTRANSCRIPT:")

# field -> (env var, default)
_INT_ENV: dict[str, tuple[str, int]] = {
    "n_ctx": ("INTAKE_N_CTX", 4096),
    "n_threads": ("INTAKE_N_THREADS", 0),
    "n_batch": ("INTAKE_N_BATCH", 128),
    "max_new_tokens": ("INTAKE_EXTRACTION_MAX_NEW_TOKENS", 384),
    "gpu_layers": ("INTAKE_GPU_LAYERS", -1),
    "context_margin": ("INTAKE_CONTEXT_MARGIN", 64),
}


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer") from err


def _read_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class LlamaCppConfig:
    """Model file and context settings for the llama.cpp backend."""

    gguf_path: Path
    n_ctx: int = 4096
    n_threads: int = 0
    n_batch: int = 128
    max_new_tokens: int = 384
    gpu_layers: int = -1
    context_margin: int = 64
    json_grammar: bool = True

    @classmethod
    def from_env(cls) -> "LlamaCppConfig":
        raw_path = os.getenv("INTAKE_GGUF_PATH", "").strip()
        if not raw_path:
            raise ValueError("INTAKE_GGUF_PATH is required for llama.cpp backend.")
        gguf_path = Path(raw_path)
        if not gguf_path.exists():
            raise FileNotFoundError(f"INTAKE_GGUF_PATH does not exist: {gguf_path}")
        numbers = {field: _read_int(*env) for field, env in _INT_ENV.items()}
        return cls(
            gguf_path=gguf_path,
            json_grammar=_read_flag("INTAKE_ENABLE_JSON_GRAMMAR", True),
            **numbers,
        )


def backend_error(err: Exception) -> ExtractionModelError:
    """Map a llama.cpp runtime failure onto the extraction error family."""
    message = str(err)
    lowered = message.lower()
    if "context window" in lowered:
        return ContextBudgetExceededError(message)
    if "llama_decode" in lowered or "decode" in lowered:
        return ModelDecodeError(message)
    return ExtractionModelError(message)


class LlamaCppExtractionService(BaseLLMModel):
    """
    Local extraction model using llama.cpp (GGUF).

    Calls are serialized: a llama.cpp context is not safe to share between
    threads, and batch runs call in from worker threads.
    """

    def __init__(self, config: LlamaCppConfig | None = None) -> None:
        print("[llama.cpp] Loading extraction model...")
        self.config = config or LlamaCppConfig.from_env()
        self._lock = threading.Lock()

        try:
            from llama_cpp import Llama  # type: ignore
        except ImportError as err:
            raise ImportError(
                "llama_cpp is required for the llamacpp extraction backend. "
                "Install bite-intake[llm]."
            ) from err

        self.client = Llama(
            model_path=str(self.config.gguf_path),
            n_ctx=self.config.n_ctx,
            n_threads=self.config.n_threads or (os.cpu_count() or 1),
            n_batch=self.config.n_batch,
            n_gpu_layers=self.config.gpu_layers,
            verbose=False,
        )
        print(f"[llama.cpp] Loaded {self.config.gguf_path.name} (n_ctx={self.config.n_ctx})")

    def count_tokens(self, prompt: str) -> int:
        try:
            return len(self.client.tokenize(prompt.encode("utf-8")))
        except (AttributeError, RuntimeError, TypeError):
            return max(1, len(prompt) // 4)

    def output_budget(self, prompt: str, requested: int | None) -> int:
        """
        Output tokens available for this prompt.

        Transcripts are never trimmed: a prompt that leaves no room raises
        ContextBudgetExceededError before the model is called.
        """
        wanted = self.config.max_new_tokens if requested is None else requested
        if wanted < 1:
            raise ContextBudgetExceededError("Requested output tokens must be positive.")
        prompt_tokens = self.count_tokens(prompt)
        room = self.config.n_ctx - prompt_tokens - self.config.context_margin
        if room < 1:
            raise ContextBudgetExceededError(
                f"Prompt of {prompt_tokens} tokens exceeds the context budget of {self.config.n_ctx}.",
                prompt_tokens=prompt_tokens,
                n_ctx=self.config.n_ctx,
            )
        return min(wanted, room)

    def _grammar_for(self, request: ExtractionRequest):
        if request.json_schema is None or not self.config.json_grammar:
            return None
        from llama_cpp import LlamaGrammar  # type: ignore

        return LlamaGrammar.from_json_schema(json.dumps(request.json_schema), verbose=False)

    def complete(self, request: ExtractionRequest) -> str:
        stops = request.stop or EXTRACTION_STOPS
        with self._lock:
            max_tokens = self.output_budget(request.prompt, request.max_new_tokens)
            call_kwargs: dict[str, object] = {
                "max_tokens": max_tokens,
                "temperature": request.temperature,
                "top_p": 1.0,
                "stop": list(stops),
            }
            try:
                grammar = self._grammar_for(request)
                if grammar is not None:
                    call_kwargs["grammar"] = grammar
                response = self.client(request.prompt, **call_kwargs)
            except ExtractionModelError:
                raise
            except Exception as err:
                raise backend_error(err) from err

        choices = response.get("choices") or [{}]
        return truncate_at_stop(choices[0].get("text", "").strip(), stops)

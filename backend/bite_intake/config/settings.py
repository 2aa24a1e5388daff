"""Configuration and extraction backend factory for the intake pipeline."""
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict

from dotenv import load_dotenv


# Singleton instances, loaded once per process
_settings: "IntakeSettings | None" = None
_backends: Dict[str, Any] = None
_lock = threading.RLock()

_SUPPORTED_EXTRACTION_BACKENDS = ("rules", "llamacpp")
_DEFAULT_PROVINCE = "Metro Manila"


@dataclass(frozen=True)
class IntakeSettings:
    """Process-wide, read-only pipeline configuration."""

    default_province: str = _DEFAULT_PROVINCE
    extraction_backend: str = "rules"
    batch_timeout_s: float | None = None
    extraction_max_new_tokens: int = 384


def _normalize_choice(env_name: str, supported: tuple[str, ...], default: str) -> str:
    raw = os.environ.get(env_name, default).strip().lower()
    if raw in supported:
        return raw
    supported_values = ", ".join(supported)
    raise ValueError(
        f"Unsupported {env_name} value '{raw}'. Supported values: {supported_values}."
    )


def _get_optional_float_env(name: str) -> float | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be a number") from err
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _get_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        value = int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer") from err
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def load_settings() -> IntakeSettings:
    """Build settings from the environment (and a local .env file)."""
    load_dotenv()
    return IntakeSettings(
        default_province=os.environ.get(
            "INTAKE_DEFAULT_PROVINCE", _DEFAULT_PROVINCE
        ).strip(),
        extraction_backend=_normalize_choice(
            "INTAKE_EXTRACTION_BACKEND",
            _SUPPORTED_EXTRACTION_BACKENDS,
            "rules",
        ),
        batch_timeout_s=_get_optional_float_env("INTAKE_BATCH_TIMEOUT_S"),
        extraction_max_new_tokens=_get_int_env(
            "INTAKE_EXTRACTION_MAX_NEW_TOKENS", 384
        ),
    )


def get_settings() -> IntakeSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        with _lock:
            if _settings is None:
                _settings = load_settings()
    return _settings


def _build_extractor(settings: IntakeSettings):
    # Imported lazily so the rule-based path never touches the LLM stack.
    from ..agents.intake.extraction import RuleBasedExtractor

    if settings.extraction_backend == "rules":
        return RuleBasedExtractor()
    if settings.extraction_backend == "llamacpp":
        from ..agents.intake.workflows import LLMFieldExtractor
        from ..services.llm import LlamaCppExtractionService

        print("[Services] Using llama.cpp extraction backend")
        return LLMFieldExtractor(
            LlamaCppExtractionService(),
            max_new_tokens=settings.extraction_max_new_tokens,
        )
    raise ValueError(f"Unsupported extraction backend: {settings.extraction_backend}")


def get_extractor():
    """
    Factory function to get or initialize the configured field extractor.

    The rule-based extractor is the default; the llama.cpp backend is
    enabled with INTAKE_EXTRACTION_BACKEND=llamacpp.
    """
    global _backends
    if _backends is None:
        settings = get_settings()
        with _lock:
            if _backends is None:
                _backends = {"extractor": _build_extractor(settings)}
    return _backends["extractor"]

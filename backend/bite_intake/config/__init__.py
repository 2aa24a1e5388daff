"""Configuration module for the intake pipeline."""
from .settings import (
    IntakeSettings,
    get_extractor,
    get_settings,
    load_settings,
)

__all__ = [
    "IntakeSettings",
    "get_extractor",
    "get_settings",
    "load_settings",
]

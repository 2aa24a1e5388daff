"""Prompt templates for the intake agent."""
from .extraction import INTAKE_EXTRACTION_PROMPT

__all__ = ["INTAKE_EXTRACTION_PROMPT"]

"""Intake agent implementations."""

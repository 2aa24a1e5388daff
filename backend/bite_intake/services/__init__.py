"""External model services used by the intake pipeline."""

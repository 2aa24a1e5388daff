"""Bite-center intake agent module."""
from .assembler import assemble_record
from .corrections import CorrectionTable, get_correction_table, normalize
from .extraction import PartialIntakeRecord, RuleBasedExtractor, extract
from .incident import IncidentFindings, scan_incident
from .risk_rules import RiskAssessment, classify

__all__ = [
    "assemble_record",
    "CorrectionTable",
    "get_correction_table",
    "normalize",
    "PartialIntakeRecord",
    "RuleBasedExtractor",
    "extract",
    "IncidentFindings",
    "scan_incident",
    "RiskAssessment",
    "classify",
]

"""Deterministic rabies exposure triage rules."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ...core.types import (
    CATEGORY_I,
    CATEGORY_II,
    CATEGORY_III,
    RISK_LEVEL_HIGH,
    RISK_LEVEL_LOW,
    RISK_LEVEL_MODERATE,
)
from .extraction import PartialIntakeRecord
from .incident import (
    EXPOSURE_BITE,
    EXPOSURE_LICK_INTACT_SKIN,
    EXPOSURE_LICK_OPEN_WOUND,
    EXPOSURE_NIBBLE,
    EXPOSURE_SCRATCH,
    IncidentFindings,
)

# Head, neck, fingers and the parts of the face are high-risk bite sites.
HIGH_RISK_LOCATIONS: tuple[str, ...] = (
    "Head",
    "Face",
    "Neck",
    "Finger",
    "Lip",
    "Ear",
    "Nose",
    "Eye",
    "Mouth",
    "Cheek",
)

_MECHANISM_NOUNS: dict[str, str] = {
    EXPOSURE_BITE: "bite",
    EXPOSURE_SCRATCH: "scratch",
    EXPOSURE_LICK_OPEN_WOUND: "lick",
    EXPOSURE_NIBBLE: "nibble",
}


@dataclass(frozen=True)
class RiskAssessment:
    """Triage outcome; level and category always come as a pair."""

    risk_level: str
    triage_category: str
    risk_flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class RiskRule:
    """One justification check inside a triage tier."""

    rule_id: str
    flag: str
    applies: Callable[[IncidentFindings], bool]


@dataclass(frozen=True)
class RiskTier:
    """A risk level, its category and the rules that place a record in it."""

    risk_level: str
    triage_category: str
    rules: tuple[RiskRule, ...]


def _location_flags(findings: IncidentFindings) -> list[str]:
    # A lick on intact skin is Category I wherever it lands.
    exposures = [e for e in findings.exposures if e != EXPOSURE_LICK_INTACT_SKIN]
    if not exposures:
        return []
    noun = _MECHANISM_NOUNS[exposures[0]]
    return [
        f"{location} {noun} detected"
        for location in findings.locations
        if location in HIGH_RISK_LOCATIONS
    ]


def _is_minor_abrasion(findings: IncidentFindings) -> bool:
    return (
        EXPOSURE_SCRATCH in findings.exposures
        and findings.minor
        and findings.explicitly_non_bleeding
        and not findings.bleeding
    )


_HIGH_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        rule_id="bleeding_wound",
        flag="Bleeding wound",
        applies=lambda f: f.bleeding,
    ),
    RiskRule(
        rule_id="deep_puncture",
        flag="Deep puncture wound",
        applies=lambda f: f.deep_puncture,
    ),
    RiskRule(
        rule_id="lick_broken_skin",
        flag="Lick on broken skin",
        applies=lambda f: EXPOSURE_LICK_OPEN_WOUND in f.exposures,
    ),
    RiskRule(
        rule_id="lick_mucous_membrane",
        flag="Lick on mucous membrane",
        applies=lambda f: f.mucous_membrane,
    ),
    RiskRule(
        rule_id="bat_exposure",
        flag="Bat exposure",
        applies=lambda f: f.animal == "Bat",
    ),
    RiskRule(
        rule_id="unprovoked_behavior",
        flag="Unprovoked behavior",
        applies=lambda f: f.unprovoked,
    ),
)

_MODERATE_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        rule_id="nibble_uncovered_skin",
        flag="Nibbling on uncovered skin",
        applies=lambda f: EXPOSURE_NIBBLE in f.exposures and not f.covered_by_clothing,
    ),
    RiskRule(
        rule_id="minor_abrasion",
        flag="Minor abrasion without bleeding",
        applies=_is_minor_abrasion,
    ),
)

_TIERS: tuple[RiskTier, ...] = (
    RiskTier(RISK_LEVEL_HIGH, CATEGORY_III, _HIGH_RULES),
    RiskTier(RISK_LEVEL_MODERATE, CATEGORY_II, _MODERATE_RULES),
)


def _tier_flags(tier: RiskTier, findings: IncidentFindings) -> list[str]:
    flags = _location_flags(findings) if tier.risk_level == RISK_LEVEL_HIGH else []
    flags.extend(rule.flag for rule in tier.rules if rule.applies(findings))
    return flags


def classify(partial: PartialIntakeRecord) -> RiskAssessment:
    """
    Classify the rabies exposure risk of an extracted record.

    Only the incident findings are read. Tiers are checked from High down;
    the first tier with at least one matching rule wins and every flag of
    that tier is reported in rule order. Anything else is Low Risk with no
    flags.
    """
    findings = partial.incident
    for tier in _TIERS:
        flags = _tier_flags(tier, findings)
        if flags:
            return RiskAssessment(
                risk_level=tier.risk_level,
                triage_category=tier.triage_category,
                risk_flags=tuple(flags),
            )
    return RiskAssessment(risk_level=RISK_LEVEL_LOW, triage_category=CATEGORY_I)

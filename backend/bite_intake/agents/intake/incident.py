"""Deterministic scanner for the bite/scratch/lick incident description."""
from __future__ import annotations

import re
from dataclasses import dataclass

from .utils import (
    answer_to_question,
    find_negated,
    find_positive,
    is_negated,
    split_sentences,
)

EXPOSURE_BITE = "Bite"
EXPOSURE_SCRATCH = "Scratch"
EXPOSURE_LICK_OPEN_WOUND = "Lick on open wound"
EXPOSURE_LICK_INTACT_SKIN = "Lick on intact skin"
EXPOSURE_NIBBLE = "Nibble"

LICK_EXPOSURES = (EXPOSURE_LICK_OPEN_WOUND, EXPOSURE_LICK_INTACT_SKIN)

VACCINATED = "vaccinated"
UNVACCINATED = "unvaccinated"
UNKNOWN_STATUS = "unknown"


@dataclass(frozen=True)
class IncidentFindings:
    """Facts about the exposure that the risk rules are allowed to read."""

    exposures: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    animal: str = ""
    bleeding: bool = False
    explicitly_non_bleeding: bool = False
    deep_puncture: bool = False
    minor: bool = False
    intact_skin: bool = False
    mucous_membrane: bool = False
    covered_by_clothing: bool = False
    unprovoked: bool = False


_EXPOSURE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (EXPOSURE_NIBBLE, re.compile(r"\bnibbl(?:e|ed|es|ing)\b")),
    (EXPOSURE_BITE, re.compile(r"\b(?:bite|bites|biting|bitten)\b|(?<!\ba )(?<!little )\bbit\b")),
    (EXPOSURE_SCRATCH, re.compile(r"\b(?:scratch(?:ed|es|ing)?|abrasions?)\b")),
    ("lick", re.compile(r"\blick(?:ed|s|ing)?\b")),
)

_INTACT_SKIN = re.compile(
    r"\bintact\b|\bunbroken skin\b|\bskin (?:was |is )?not broken\b|\bno (?:open )?wounds?\b"
)
_MUCOUS = re.compile(r"\bmucous\b|\bmucosa\b|\bmucosal\b")
_MUCOUS_LOCATIONS = frozenset({"Mouth", "Eye", "Lip", "Nose"})

_BLEEDING = re.compile(r"\b(?:bleeding|bled|bleeds?|blood|bloody)\b")
_DEEP_PUNCTURE = re.compile(r"\b(?:deep|punctures?|punctured|transdermal)\b")
_MINOR = re.compile(
    r"\b(?:minor|small|slight|slightly|superficial|light|mild|tiny)\b|\b(?:just|only) a scratch\b"
)
_COVERED = re.compile(
    r"\bthrough (?:the |his |her |my |their )?(?:clothes|clothing|pants|shirt|sleeve|jeans|socks)\b"
    r"|\bcovered\b|\bmay damit\b"
)
_UNCOVERED = re.compile(r"\buncovered\b|\bbare (?:skin|leg|arm|hand|foot)\b|\bexposed skin\b")
_UNPROVOKED = re.compile(
    r"\bunprovoked\b|\bwithout (?:any )?provocation\b|\bno provocation\b|\bfor no reason\b"
    r"|\bsuddenly (?:attacked|bit|chased)\b"
)
_CONTACT_ONLY = re.compile(
    r"\b(?:feeding|fed|feeds?|touching|touched|petting|petted|playing with|played with|"
    r"interacting|handling|handled|alaga)\b"
)

_LOCATION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Head", re.compile(r"\bhead\b")),
    ("Face", re.compile(r"\bface\b")),
    ("Neck", re.compile(r"\bneck\b")),
    ("Finger", re.compile(r"\b(?:fingers?|thumbs?)\b")),
    ("Hand", re.compile(r"\b(?:hands?|palms?)\b")),
    ("Wrist", re.compile(r"\bwrists?\b")),
    ("Arm", re.compile(r"\b(?:arms?|forearms?)\b")),
    ("Elbow", re.compile(r"\belbows?\b")),
    ("Shoulder", re.compile(r"\bshoulders?\b")),
    ("Chest", re.compile(r"\bchest\b")),
    ("Abdomen", re.compile(r"\b(?:abdomen|stomach|belly|tummy)\b")),
    ("Back", re.compile(r"\b(?:on|sa|the|his|her|my|lower|upper) back\b")),
    ("Thigh", re.compile(r"\bthighs?\b")),
    ("Knee", re.compile(r"\bknees?\b")),
    ("Leg", re.compile(r"\b(?:legs?|calf|calves|shins?)\b")),
    ("Ankle", re.compile(r"\bankles?\b")),
    ("Foot", re.compile(r"\b(?:foot|feet)\b")),
    ("Toe", re.compile(r"\btoes?\b")),
    ("Lip", re.compile(r"\blips?\b")),
    ("Ear", re.compile(r"\bears?\b")),
    ("Nose", re.compile(r"\bnose\b")),
    ("Eye", re.compile(r"\beyes?\b")),
    ("Mouth", re.compile(r"\bmouth\b")),
    ("Cheek", re.compile(r"\bcheeks?\b")),
)

_ANIMAL_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Dog", re.compile(r"\b(?:dogs?|pupp(?:y|ies)|canine)\b")),
    ("Cat", re.compile(r"\b(?:cats?|kittens?|feline)\b")),
    ("Bat", re.compile(r"\bbats?\b")),
    ("Rat", re.compile(r"\b(?:rats?|mouse|mice|rodents?)\b")),
    ("Monkey", re.compile(r"\bmonkeys?\b")),
    ("Snake", re.compile(r"\bsnakes?\b")),
    ("Other", re.compile(
        r"\b(?:pigs?|horses?|goats?|carabaos?|cows?|squirrels?|hamsters?|rabbits?|ferrets?)\b"
    )),
)

_STRAY_OR_NO_RECORD = re.compile(
    r"\bstray\b|\bno owner\b|\bwithout (?:an )?owner\b|\bownerless\b|\bunknown owner\b"
    r"|\bno (?:vaccination |vaccine )?records?\b|\bno card\b"
)
_UNVACCINATED = re.compile(r"\bunvaccinated\b|\bno vaccines?\b|\bno shots\b")
_VACCINATED = re.compile(r"\bvaccinated\b|\bhas (?:its |their )?(?:vaccines?|shots)\b|\bcomplete shots\b")
PATIENT_VACCINE = re.compile(
    r"\banti-rabies\b|\brabies (?:vaccines?|shots?|injections?)\b|\bpep\b|\bpost-exposure\b"
)
_PATIENT_REFERENCE = re.compile(r"\b(?:i|i'm|ako|me|my|ka|you|your|ikaw|mo)\b")
_ANIMAL_REFERENCE = re.compile(
    r"\b(?:dogs?|pupp(?:y|ies)|cats?|kittens?|bats?|rats?|monkeys?|animals?|it|its|owner)\b"
)


def _ordered_matches(
    patterns: tuple[tuple[str, re.Pattern[str]], ...],
    text: str,
    negatable: bool = True,
) -> list[tuple[int, str]]:
    found: list[tuple[int, str]] = []
    for label, pattern in patterns:
        for match in pattern.finditer(text):
            if negatable and is_negated(text, match.start()):
                continue
            found.append((match.start(), label))
            break
    found.sort()
    return found


def _dedupe(labels: list[str]) -> tuple[str, ...]:
    seen: list[str] = []
    for label in labels:
        if label not in seen:
            seen.append(label)
    return tuple(seen)


def scan_exposures(lowered: str) -> tuple[str, ...]:
    """Return canonical exposure terms in order of first mention."""
    intact = bool(find_positive(_INTACT_SKIN, lowered))
    labels: list[str] = []
    for _, label in _ordered_matches(_EXPOSURE_PATTERNS, lowered):
        if label == "lick":
            label = EXPOSURE_LICK_INTACT_SKIN if intact else EXPOSURE_LICK_OPEN_WOUND
        labels.append(label)
    return _dedupe(labels)


def scan_locations(lowered: str) -> tuple[str, ...]:
    """Return canonical body locations in order of first mention."""
    return _dedupe([label for _, label in _ordered_matches(_LOCATION_PATTERNS, lowered)])


def scan_animal(lowered: str) -> str:
    """Return the first explicitly named animal, or Dog for contact-only context."""
    found = _ordered_matches(_ANIMAL_PATTERNS, lowered, negatable=False)
    if found:
        return found[0][1]
    if _CONTACT_ONLY.search(lowered):
        return "Dog"
    return ""


def is_patient_vaccine_sentence(sentence: str) -> bool:
    """Whether a sentence talks about the patient's own rabies vaccination."""
    if PATIENT_VACCINE.search(sentence):
        return True
    return bool(_PATIENT_REFERENCE.search(sentence)) and not _ANIMAL_REFERENCE.search(sentence)


def scan_vaccination_status(lowered: str) -> str:
    """Resolve the animal's vaccination status; stray or unrecorded animals are unknown."""
    if find_positive(_STRAY_OR_NO_RECORD, lowered):
        return UNKNOWN_STATUS
    sentences = split_sentences(lowered)
    for index, sentence in enumerate(sentences):
        if is_patient_vaccine_sentence(sentence):
            continue
        if sentence.endswith("?"):
            if _VACCINATED.search(sentence):
                reply = answer_to_question(sentences[index:index + 2], _VACCINATED)
                if reply is not None:
                    return VACCINATED if reply else UNVACCINATED
            continue
        if find_positive(_UNVACCINATED, sentence) or find_negated(_VACCINATED, sentence):
            return UNVACCINATED
        if find_positive(_VACCINATED, sentence):
            return VACCINATED
    return UNKNOWN_STATUS


def scan_incident(text: str) -> IncidentFindings:
    """
    Scan normalized transcript text for the incident facts used in triage.

    Exposures, locations and the animal are read from the whole transcript,
    nurse questions included. Wound descriptors are read from statements only,
    plus plain yes/no replies to a question about bleeding.

    :param text: Normalized transcript
    :return: IncidentFindings with every attribute resolved to a default
    """
    lowered = text.lower()
    sentences = split_sentences(lowered)
    statements = "\n".join(sentence for sentence in sentences if not sentence.endswith("?"))

    exposures = scan_exposures(lowered)
    locations = scan_locations(lowered)
    has_lick = any(exposure in LICK_EXPOSURES for exposure in exposures)

    bleeding_reply = answer_to_question(sentences, _BLEEDING)
    bleeding = bool(find_positive(_BLEEDING, statements)) or bleeding_reply is True
    explicitly_non_bleeding = (
        bool(find_negated(_BLEEDING, statements)) or bleeding_reply is False
    )
    covered = bool(find_positive(_COVERED, statements)) and not _UNCOVERED.search(statements)

    return IncidentFindings(
        exposures=exposures,
        locations=locations,
        animal=scan_animal(lowered),
        bleeding=bleeding,
        explicitly_non_bleeding=explicitly_non_bleeding and not bleeding,
        deep_puncture=bool(find_positive(_DEEP_PUNCTURE, statements)),
        minor=bool(find_positive(_MINOR, statements)),
        intact_skin=bool(find_positive(_INTACT_SKIN, lowered)),
        mucous_membrane=has_lick and (
            bool(_MUCOUS.search(lowered)) or bool(_MUCOUS_LOCATIONS.intersection(locations))
        ),
        covered_by_clothing=covered,
        unprovoked=bool(find_positive(_UNPROVOKED, statements)),
    )

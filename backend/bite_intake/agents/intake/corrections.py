"""Phonetic correction table and transcript normalizer.

Speech-to-text on a Taglish bite-exposure interview systematically mishears
Tagalog incident vocabulary, honorifics, address words and spoken digits.
The table below rewrites those surface forms into the canonical terms the
field extractor and risk rules key on.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from ...core.logging_utils import log_event

CORRECTION_TABLE_VERSION = "2024.11-1"

# (text, match_start, match_end) -> whether the rule may fire here
ContextHint = Callable[[str, int, int], bool]


class CorrectionDomain(str, Enum):
    INCIDENT = "Incident"
    NAME = "Name"
    ADDRESS = "Address"
    NUMERAL = "Numeral"


@dataclass(frozen=True)
class CorrectionRule:
    """One canonical term and the surface forms that are corrected to it."""

    patterns: tuple[str, ...]
    canonical: str
    domain: CorrectionDomain
    context_hint: ContextHint | None = None


# ---------------------------------------------------------------------------
# Context hints
# ---------------------------------------------------------------------------

_CLAUSE_BREAKS = ".!?;\n"

_NUMERAL_KEYWORD_RE = re.compile(
    r"\b(?:numbers?|numero|num|cellphone|cell|cel|selpon|celfone|cp|mobile|phone|"
    r"telepono|contact|house|bahay|blk|block|lot|unit|zip|sip|code|kowd|zipcode|postal)\b",
    re.IGNORECASE,
)

_NUMERAL_WORDS: dict[str, str] = {
    "zero": "0", "sero": "0", "siro": "0",
    "one": "1", "isa": "1", "uno": "1",
    "two": "2", "dalawa": "2", "dos": "2",
    "three": "3", "tatlo": "3", "tres": "3",
    "four": "4", "apat": "4", "kwatro": "4", "kuwatro": "4",
    "five": "5", "lima": "5", "singko": "5", "sinko": "5",
    "six": "6", "anim": "6", "sais": "6",
    "seven": "7", "pito": "7", "siyete": "7", "syete": "7",
    "eight": "8", "walo": "8", "otso": "8",
    "nine": "9", "siyam": "9", "nuwebe": "9", "nuebe": "9",
}


def _strip_token(token: str) -> str:
    return token.strip(",:()'\"").lower()


def _is_numeral_token(token: str) -> bool:
    cleaned = _strip_token(token)
    if not cleaned:
        return False
    return cleaned.isdigit() or cleaned in _NUMERAL_WORDS


def _numeral_context(text: str, start: int, end: int) -> bool:
    clause_start = max(text.rfind(mark, 0, start) for mark in _CLAUSE_BREAKS) + 1
    if not _NUMERAL_KEYWORD_RE.search(text, clause_start, start):
        return False
    before = text[clause_start:start].split()
    after = text[end:].split()
    previous = before[-1] if before else ""
    following = after[0] if after else ""
    if _is_numeral_token(previous) or _is_numeral_token(following):
        return True
    return bool(previous) and bool(_NUMERAL_KEYWORD_RE.fullmatch(_strip_token(previous)))


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

def _rule(canonical: str, domain: CorrectionDomain, *patterns: str, hint: ContextHint | None = None) -> CorrectionRule:
    return CorrectionRule(patterns=patterns, canonical=canonical, domain=domain, context_hint=hint)


_I = CorrectionDomain.INCIDENT
_N = CorrectionDomain.NAME
_A = CorrectionDomain.ADDRESS
_D = CorrectionDomain.NUMERAL

CORRECTION_RULES: tuple[CorrectionRule, ...] = (
    # Exposure mechanisms
    _rule("scratched", _I, "nakalimuto", "nakalmuto", "nakalmot", "nakalmut",
          "kinalmot", "kinalmut", "kinalmuto", "kalmot", "kalmut"),
    _rule("scratch", _I, "scrash", "skratch", "eskratch", "iscratch"),
    _rule("minor abrasion", _I, "gasgas lang", "gasgas lamang", "galos lang",
          "galos lamang"),
    _rule("abrasion", _I, "gasgas", "nagasgas", "galos", "nagalusan"),
    _rule("bitten", _I, "nakagat", "kinagat", "kinagatan", "nakagatan", "kina gat"),
    _rule("bite", _I, "kagat", "bayt"),
    _rule("nibbled", _I, "kinagat kagat", "kinakagat kagat", "nginatngat",
          "nginangatngat"),
    _rule("licked", _I, "dinilaan", "dinidilaan", "dinilan"),
    _rule("lick", _I, "lik"),
    # Wound description
    _rule("no bleeding", _I, "walang dugo", "walang lumabas na dugo",
          "hindi dumugo", "hindi dumudugo", "di dumugo"),
    _rule("bleeding", _I, "dumudugo", "dumugo", "nagdugo", "may dugo", "dugo"),
    _rule("deep wound", _I, "malalim na sugat"),
    _rule("deep", _I, "malalim"),
    _rule("intact skin", _I, "walang sugat", "buo ang balat", "hindi nasugatan"),
    _rule("open wound", _I, "bukas na sugat", "may sugat"),
    _rule("wound", _I, "sugat"),
    _rule("skin", _I, "balat"),
    _rule("small", _I, "maliit", "maliit lang"),
    _rule("superficial", _I, "mababaw", "mababaw lang"),
    _rule("unprovoked", _I, "bigla na lang", "bigla nalang", "basta na lang",
          "basta nalang", "walang dahilan"),
    # Contact-only context
    _rule("feeding", _I, "pinapakain", "pinakain", "nagpapakain"),
    _rule("touching", _I, "hinahaplos", "hinawakan", "hinimas", "hinihimas"),
    _rule("playing with", _I, "nakikipaglaro", "nilalaro", "naglalaro"),
    # Animals
    _rule("stray dog", _I, "asong gala", "asong kalye", "askal"),
    _rule("stray cat", _I, "pusang gala", "pusang kalye"),
    _rule("dog", _I, "aso", "asong"),
    _rule("puppy", _I, "tuta"),
    _rule("cat", _I, "pusa", "posa", "pussa"),
    _rule("kitten", _I, "kuting"),
    _rule("bat", _I, "paniki", "paneki", "panike"),
    _rule("rat", _I, "daga"),
    _rule("monkey", _I, "unggoy", "ungoy", "matsing"),
    _rule("snake", _I, "ahas"),
    _rule("pig", _I, "baboy"),
    _rule("horse", _I, "kabayo"),
    _rule("goat", _I, "kambing"),
    _rule("carabao", _I, "kalabaw"),
    # Ownership and vaccination
    _rule("stray", _I, "walang may ari", "walang amo", "walang nagmamay ari", "gala"),
    _rule("no record", _I, "walang record", "walang rekord", "walang vaccination record",
          "walang card"),
    _rule("unvaccinated", _I, "hindi bakunado", "hindi pa bakunado", "di bakunado",
          "walang bakuna", "hindi nabakunahan", "hindi pa nabakunahan"),
    _rule("vaccinated", _I, "bakunado", "may bakuna", "nabakunahan", "binakunahan"),
    _rule("anti-rabies", _I, "anti rabies", "antirabies", "anti rabis", "anti rebis",
          "bakuna sa rabies", "bakuna kontra rabies"),
    _rule("rabies", _I, "rabis", "rebis", "rabbies"),
    _rule("vaccine", _I, "bakuna"),
    # Body locations
    _rule("head", _I, "ulo"),
    _rule("face", _I, "mukha"),
    _rule("neck", _I, "leeg"),
    _rule("toe", _I, "daliri sa paa"),
    _rule("finger", _I, "daliri", "daliri sa kamay"),
    _rule("hand", _I, "kamay"),
    _rule("arm", _I, "braso"),
    _rule("leg", _I, "binti"),
    _rule("foot", _I, "paa"),
    _rule("knee", _I, "tuhod"),
    _rule("shoulder", _I, "balikat"),
    _rule("back", _I, "likod"),
    _rule("chest", _I, "dibdib"),
    _rule("abdomen", _I, "tiyan"),
    _rule("thigh", _I, "hita"),
    _rule("elbow", _I, "siko"),
    _rule("ankle", _I, "bukung bukong"),
    _rule("wrist", _I, "pulso"),
    _rule("lip", _I, "labi"),
    _rule("ear", _I, "tenga", "tainga"),
    _rule("nose", _I, "ilong"),
    _rule("eye", _I, "mata"),
    _rule("mouth", _I, "bibig"),
    _rule("cheek", _I, "pisngi"),
    # Allergy and history
    _rule("no allergies", _I, "walang allergy", "walang alerdyi", "walang alerhiya",
          "wala akong allergy", "wala po akong allergy"),
    _rule("allergic to", _I, "allergic ako sa", "allergic po ako sa", "alerdyik ako sa",
          "may allergy ako sa", "allergy ako sa"),
    _rule("allergy", _I, "alerdyi", "alerhiya", "alerji", "alergy"),
    _rule("male", _I, "lalaki"),
    _rule("female", _I, "babae"),
    _rule("sex", _I, "kasarian"),
    _rule("born on", _I, "ipinanganak ako noong", "ipinanganak ako nung",
          "pinanganak ako noong", "ipinanganak noong", "pinanganak noong"),
    _rule("born", _I, "ipinanganak", "pinanganak"),
    _rule("birthday", _I, "kaarawan", "petsa ng kapanganakan"),
    _rule("happened", _I, "nangyari", "naganap"),
    _rule("on", _I, "noong", "nung"),
    # Names, honorifics and relationships
    _rule("patient name is", _N, "ang pangalan ng pasyente ay", "pangalan ng pasyente"),
    _rule("my name is", _N, "ang pangalan ko ay", "ang pangalan ko po ay",
          "pangalan ko ay", "pangalan ko po ay", "pangalan ko po", "ako po si", "ako si"),
    _rule("first name", _N, "unang pangalan"),
    _rule("middle name", _N, "gitnang pangalan"),
    _rule("last name", _N, "apelyido", "apelyedo", "huling pangalan"),
    _rule("Mrs", _N, "ginang", "gng", "misis"),
    _rule("Mr", _N, "ginoong", "ginoo", "mister"),
    _rule("Ms", _N, "binibining", "binibini"),
    _rule("Jr", _N, "dyunyor", "junyor", "junior"),
    _rule("Sr", _N, "senyor"),
    _rule("spouse", _N, "asawa", "misis ko", "mister ko"),
    _rule("mother", _N, "nanay", "inay", "ina", "mama", "mommy"),
    _rule("father", _N, "tatay", "itay", "ama", "papa", "daddy"),
    _rule("sibling", _N, "kapatid", "kuya"),
    _rule("child", _N, "anak"),
    _rule("grandmother", _N, "lola"),
    _rule("grandfather", _N, "lolo"),
    _rule("aunt", _N, "tita", "tiya"),
    _rule("uncle", _N, "tito", "tiyo"),
    _rule("cousin", _N, "pinsan"),
    _rule("friend", _N, "kaibigan"),
    _rule("neighbor", _N, "kapitbahay"),
    _rule("emergency contact", _N, "emergency contact person", "contact person",
          "in case of emergency", "sa oras ng emergency", "kung may emergency",
          "taong tatawagan"),
    # Address and contact
    _rule("I live at", _A, "nakatira ako sa", "nakatira po ako sa", "nakatira sa",
          "taga"),
    _rule("my address is", _A, "ang address ko ay", "address ko ay", "address ko po ay",
          "tirahan ko ay", "ang tirahan ko ay"),
    _rule("Barangay", _A, "barangay", "baranggay", "barangy", "brgy.", "brgy", "bgy"),
    _rule("Street", _A, "kalye", "kalya"),
    _rule("City of", _A, "lungsod ng", "siyudad ng", "syudad ng"),
    _rule("City", _A, "lungsod", "siyudad", "syudad"),
    _rule("Municipality of", _A, "bayan ng", "munisipyo ng", "munisipalidad ng"),
    _rule("Province of", _A, "probinsya ng", "probinsiya ng", "lalawigan ng"),
    _rule("Province", _A, "probinsya", "probinsiya", "lalawigan"),
    _rule("zip code", _A, "zipcode", "sip code", "zip kowd"),
    _rule("email", _A, "e mail", "imeyl", "imel", "i mail"),
    _rule("cellphone", _A, "selpon", "celfone", "cel phone", "cp"),
    _rule("number", _A, "numero"),
    # Months
    _rule("January", _D, "enero"),
    _rule("February", _D, "pebrero", "febrero"),
    _rule("March", _D, "marso"),
    _rule("April", _D, "abril"),
    _rule("May", _D, "mayo"),
    _rule("June", _D, "hunyo", "junio"),
    _rule("July", _D, "hulyo", "julio"),
    _rule("August", _D, "agosto"),
    _rule("September", _D, "setyembre", "septiyembre", "setiembre"),
    _rule("October", _D, "oktubre", "octubre"),
    _rule("November", _D, "nobyembre", "noviembre"),
    _rule("December", _D, "disyembre", "diciembre"),
) + tuple(
    _rule(digit, _D, *sorted(word for word, value in _NUMERAL_WORDS.items() if value == digit),
          hint=_numeral_context)
    for digit in sorted(set(_NUMERAL_WORDS.values()))
)


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

_TOKEN_SEPARATOR = r"[\s,.\-]*"
_MAX_PASSES = 8


def _pattern_regex(pattern: str) -> str:
    tokens = [token for token in re.split(r"[\s\-]+", pattern.strip()) if token]
    return _TOKEN_SEPARATOR.join(re.escape(token) for token in tokens)


class CorrectionTable:
    """Compiled, read-only view of a correction rule set."""

    def __init__(self, rules: Iterable[CorrectionRule], version: str = CORRECTION_TABLE_VERSION) -> None:
        self.version = version
        self.rules: tuple[CorrectionRule, ...] = tuple(rules)

        entries: list[tuple[str, CorrectionRule]] = []
        for rule in self.rules:
            for pattern in rule.patterns:
                entries.append((pattern, rule))
        # Longest surface form first so phrases are never shadowed by their parts.
        entries.sort(key=lambda entry: (-len(entry[0]), entry[0]))
        self._entries: tuple[CorrectionRule, ...] = tuple(rule for _, rule in entries)

        alternatives = [
            f"(?P<r{index}>{_pattern_regex(pattern)})"
            for index, (pattern, _) in enumerate(entries)
        ]
        self._regex = re.compile(
            rf"(?<!\w)(?:{'|'.join(alternatives)})(?!\w)",
            re.IGNORECASE,
        )

    def apply(self, text: str) -> tuple[str, int]:
        """Return the corrected text and the number of spans rewritten."""
        applied = 0

        def _replace(match: re.Match[str]) -> str:
            nonlocal applied
            rule = self._entries[int(match.lastgroup[1:])]
            if rule.context_hint is not None and not rule.context_hint(
                text, match.start(), match.end()
            ):
                return match.group(0)
            if match.group(0) != rule.canonical:
                applied += 1
            return rule.canonical

        return self._regex.sub(_replace, text), applied


_default_table: CorrectionTable | None = None


def get_correction_table() -> CorrectionTable:
    """Return the process-wide correction table, compiling it on first use."""
    global _default_table
    if _default_table is None:
        _default_table = CorrectionTable(CORRECTION_RULES)
    return _default_table


def normalize(text: str, table: CorrectionTable | None = None) -> str:
    """
    Rewrite known mis-heard tokens and phrases into canonical terms.

    Matching is case-insensitive, whole-word and tolerant of punctuation
    between the words of a phrase. Unmatched text passes through unchanged
    and normalizing already-canonical text is a no-op.

    :param text: Raw transcript text
    :param table: Correction table; defaults to the process-wide table
    :return: Normalized transcript
    """
    active_table = table or get_correction_table()
    normalized = text
    applied = 0
    passes = 0
    # A rewrite can complete a longer phrase or open a numeral context
    # (e.g. "brgy." loses its period), so apply until nothing changes.
    while passes < _MAX_PASSES:
        corrected, count = active_table.apply(normalized)
        passes += 1
        if corrected == normalized:
            break
        normalized = corrected
        applied += count
    log_event(
        component="normalizer",
        event="corrections_applied",
        level="DEBUG",
        details={"count": applied, "passes": passes, "table_version": active_table.version},
    )
    return normalized

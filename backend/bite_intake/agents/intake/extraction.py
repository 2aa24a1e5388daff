"""Rule-based field extraction from a normalized intake transcript."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Protocol

from ...config import IntakeSettings, get_settings
from ...core.types import IntakeFields
from .incident import (
    PATIENT_VACCINE,
    IncidentFindings,
    is_patient_vaccine_sentence,
    scan_incident,
    scan_vaccination_status,
)
from .utils import answer_to_question, find_positive, is_negated, split_sentences


@dataclass(frozen=True)
class PartialIntakeRecord:
    """Extractor output: any subset of record fields plus incident findings."""

    fields: Mapping[str, str] = field(default_factory=dict)
    incident: IncidentFindings = field(default_factory=IncidentFindings)


class FieldExtractor(Protocol):
    """Contract shared by the deterministic and generative extractors."""

    def extract(
        self,
        normalized_text: str,
        settings: IntakeSettings | None = None,
    ) -> PartialIntakeRecord:
        ...


# ============= Dates =============

_MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}
_MONTH_NAMES = "|".join(sorted(_MONTHS, key=len, reverse=True))
_ORDINAL = r"(?:st|nd|rd|th)?"

_DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        rf"\b(?P<month>{_MONTH_NAMES})\.?\s+(?P<day>\d{{1,2}}){_ORDINAL},?\s+(?:of\s+)?(?P<year>\d{{4}})\b",
        re.IGNORECASE,
    ),
    re.compile(
        rf"\b(?P<day>\d{{1,2}}){_ORDINAL}\s+(?:of\s+)?(?P<month>{_MONTH_NAMES})\.?,?\s+(?P<year>\d{{4}})\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})\b"),
    re.compile(r"\b(?P<month>\d{1,2})[/-](?P<day>\d{1,2})[/-](?P<year>\d{4})\b"),
)


def _month_number(token: str) -> int | None:
    if token.isdigit():
        return int(token)
    return _MONTHS.get(token.lower().rstrip("."))


def parse_date(segment: str) -> str:
    """
    Parse the first complete day/month/year date in a text segment.

    Returns an ISO date, or "" when any component (the month above all)
    is missing or the date is not valid. Partial dates are never completed.
    """
    for pattern in _DATE_PATTERNS:
        match = pattern.search(segment)
        if not match:
            continue
        month = _month_number(match.group("month"))
        day = int(match.group("day"))
        year = int(match.group("year"))
        if month is None:
            continue
        if month > 12 and day <= 12 and match.group("month").isdigit():
            month, day = day, month
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return ""
    return ""


def enforce_date_safety(value: str, stated: str) -> str:
    """
    Keep a generated date only when it is the date the transcript states.

    stated is the date parsed from the field's own segment (the birth
    statement, the vaccine sentence), so a month taken from any other date
    in the transcript is dropped.
    """
    candidate = (value or "").strip()
    if not candidate or candidate != stated:
        return ""
    return candidate


# ============= Names =============

_HONORIFICS = frozenset({
    "mr", "mrs", "ms", "miss", "dr", "sir", "maam", "ma'am", "madam", "gng", "g", "bb",
})
_EXTENSIONS: dict[str, str] = {
    "jr": "Jr.", "sr": "Sr.", "ii": "II", "iii": "III", "iv": "IV", "v": "V",
}
_SURNAME_PARTICLES = frozenset({
    "de", "dela", "del", "delos", "la", "las", "los", "san", "santa", "sta",
    "sto", "santo", "di", "van", "von",
})
_ABBREVIATIONS = frozenset({"jr.", "sr.", "sta.", "sto.", "ma.", "mr.", "mrs.", "ms.", "dr."})
_NAME_STOPWORDS = frozenset({
    "po", "and", "at", "ako", "i", "i'm", "im", "years", "year", "old", "taong", "gulang",
    "from", "born", "ay", "na", "is", "was", "the", "my", "of", "sa", "ng", "yes", "opo",
    "oo", "ho", "lang", "nga", "naman", "din", "rin", "kasi", "tapos", "pero", "but",
    "with", "who", "she", "he", "siya", "her", "his", "number", "cellphone", "mobile",
    "emergency", "contact", "email", "address", "live", "living", "age", "edad",
})
_RELATIONSHIPS: dict[str, str] = {
    "mother": "Mother", "father": "Father", "spouse": "Spouse", "wife": "Spouse",
    "husband": "Spouse", "sibling": "Sibling", "brother": "Sibling", "sister": "Sibling",
    "child": "Child", "son": "Child", "daughter": "Child", "grandmother": "Grandmother",
    "grandfather": "Grandfather", "aunt": "Aunt", "uncle": "Uncle", "cousin": "Cousin",
    "friend": "Friend", "neighbor": "Neighbor", "guardian": "Guardian", "partner": "Partner",
}
_NAME_TOKEN = re.compile(r"^[^\W\d_][\w'.\-]*$")
_NAME_FILLERS = frozenset({
    "is", "ay", "ko", "po", "si", "my", "ang", "niya", "named", "name", "her", "his",
    "na", "the", "person", "ni", "kay", "mga",
})

_NAME_INTRODUCER = re.compile(
    r"\b(?:my (?:full )?name is|(?:the )?patient(?:'s)? (?:full )?name is|"
    r"patient name is|(?P<loose>(?:the )?patient is)|(?<!first )(?<!middle )(?<!last )name\s*:)\s*",
    re.IGNORECASE,
)
_DESCRIPTIVE_WORDS = frozenset({
    "a", "an", "child", "boy", "girl", "man", "woman", "baby", "kid", "minor", "adult",
    "bitten", "scratched", "licked", "here", "now", "currently", "being", "not", "still",
    "also", "already", "okay", "fine", "stable", "conscious",
})
_LABELLED_NAME = {
    "firstName": re.compile(r"\bfirst name(?:\s+(?:is|ay|ko|po|niya))*\s*:?\s+", re.IGNORECASE),
    "middleName": re.compile(r"\bmiddle name(?:\s+(?:is|ay|ko|po|niya))*\s*:?\s+", re.IGNORECASE),
    "lastName": re.compile(
        r"\b(?:last name|surname|family name)(?:\s+(?:is|ay|ko|po|niya))*\s*:?\s+",
        re.IGNORECASE,
    ),
}


def _capitalize_name(token: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in token.split("-"))


def read_name_tokens(text: str, skip: frozenset[str] = frozenset()) -> list[str]:
    """Read up to six name tokens from the start of text."""
    tokens: list[str] = []
    for raw in text.split():
        stripped = raw.strip("\"'()")
        lowered = stripped.lower()
        bare = lowered.rstrip(",;:!?.")
        if not tokens and (not bare or bare in skip or bare in _HONORIFICS):
            continue
        if bare in _NAME_STOPWORDS or not bare:
            break
        word = stripped.rstrip(",;:!?")
        if word.endswith(".") and lowered.rstrip(",;:!?") not in _ABBREVIATIONS:
            word = word.rstrip(".")
            if _NAME_TOKEN.match(word):
                tokens.append(word)
            break
        if not _NAME_TOKEN.match(word):
            break
        tokens.append(word)
        if raw[-1:] in ",;:!?" or len(tokens) == 6:
            break
    return tokens


def parse_person_name(tokens: list[str]) -> dict[str, str]:
    """
    Split name tokens into first/middle/last/extension.

    Honorifics are dropped. A surname particle (dela, de los, san, ...) binds
    to the following word; that compound is the last name when it ends the
    name and the middle name otherwise.
    """
    words = [token.rstrip(".") for token in tokens if token.lower().rstrip(".") not in _HONORIFICS]
    result = {"first": "", "middle": "", "last": "", "extension": ""}
    if words and words[-1].lower() in _EXTENSIONS and len(words) > 1:
        result["extension"] = _EXTENSIONS[words.pop().lower()]
    if not words:
        return result

    # Group particles with the word that follows them.
    groups: list[list[str]] = []
    pending: list[str] = []
    for word in words:
        if word.lower() in _SURNAME_PARTICLES and len(groups) > 0:
            pending.append(word)
            continue
        groups.append(pending + [word])
        pending = []
    if pending:
        groups.append(pending)

    names = [" ".join(_capitalize_name(word) for word in group) for group in groups]
    if len(names) == 1:
        result["first"] = names[0]
    elif len(names) == 2:
        result["first"], result["last"] = names
    else:
        result["last"] = names[-1]
        result["middle"] = names[-2]
        result["first"] = " ".join(names[:-2])
    return result


def _capitalized_run(tokens: list[str]) -> list[str]:
    run: list[str] = []
    for token in tokens:
        if token.lower().rstrip(".") in _DESCRIPTIVE_WORDS:
            break
        if not token[:1].isupper() and token.lower().rstrip(".") not in _SURNAME_PARTICLES:
            break
        run.append(token)
    return run


def _extract_patient_name(text: str) -> IntakeFields:
    fields: IntakeFields = {}
    for match in _NAME_INTRODUCER.finditer(text):
        tokens = read_name_tokens(text[match.end():])
        if match.group("loose"):
            # "the patient is ..." also introduces descriptions, so only a
            # run of capitalized words counts as a name there.
            tokens = _capitalized_run(tokens)
        parsed = parse_person_name(tokens)
        if not parsed["first"]:
            continue
        fields.update(
            firstName=parsed["first"],
            middleName=parsed["middle"],
            lastName=parsed["last"],
            extensionName=parsed["extension"],
        )
        break
    for key, pattern in _LABELLED_NAME.items():
        labelled = pattern.search(text)
        if labelled:
            tokens = read_name_tokens(text[labelled.end():])
            if tokens:
                fields[key] = " ".join(_capitalize_name(token) for token in tokens)
    return {key: value for key, value in fields.items() if value}


# ============= Contact =============

_PHONE_RUN = re.compile(r"\+?\d(?:[\s\-]*\d){8,13}")
_EMAIL = re.compile(
    r"(?P<user>[a-z0-9_+\-]+(?:\s*(?:\.|\bdot\b|\bunderscore\b)\s*[a-z0-9_+\-]+)*)"
    r"\s*(?:@|\bat\b)\s*"
    r"(?P<domain>[a-z0-9\-]+(?:\s*(?:\.|\bdot\b)\s*[a-z0-9\-]+)*?"
    r"\s*(?:\.|\bdot\b)\s*(?:com|net|org|ph|edu|gov)(?:\s*(?:\.|\bdot\b)\s*ph)?)\b",
)


def normalize_mobile(raw: str) -> str:
    """Normalize a Philippine mobile number to 09XXXXXXXXX, or "" if it is not one."""
    digits = re.sub(r"\D", "", raw)
    if len(digits) == 10 and digits.startswith("9"):
        return "0" + digits
    if len(digits) == 11 and digits.startswith("09"):
        return digits
    if len(digits) == 12 and digits.startswith("639"):
        return "0" + digits[2:]
    return ""


def find_mobiles(text: str) -> list[tuple[int, str]]:
    """Return (position, normalized number) for every mobile number in text."""
    found: list[tuple[int, str]] = []
    for match in _PHONE_RUN.finditer(text):
        number = normalize_mobile(match.group(0))
        if number:
            found.append((match.start(), number))
    return found


def _extract_email(text: str) -> str:
    lowered = text.lower()
    if "@" not in lowered and "email" not in lowered:
        return ""
    match = _EMAIL.search(lowered)
    if not match:
        return ""
    user = re.sub(r"\s*\bdot\b\s*", ".", match.group("user"))
    user = re.sub(r"\s*\bunderscore\b\s*", "_", user)
    domain = re.sub(r"\s*\bdot\b\s*", ".", match.group("domain"))
    return re.sub(r"\s+", "", f"{user}@{domain}")


# ============= Emergency contact =============

_EMERGENCY_MARKER = re.compile(r"\bemergency contact\b|\bin case of emergency\b", re.IGNORECASE)


def _sentence_end(text: str, start: int) -> int:
    match = re.compile(r"[.!?\n](?:\s|$)").search(text, start)
    return match.end() if match else len(text)


def emergency_segment(text: str) -> tuple[int, int] | None:
    """Span of the emergency-contact statement: its sentence and the next one."""
    marker = _EMERGENCY_MARKER.search(text)
    if not marker:
        return None
    first_end = _sentence_end(text, marker.end())
    return marker.start(), _sentence_end(text, first_end)


def _extract_emergency(text: str, span: tuple[int, int]) -> IntakeFields:
    segment = text[span[0]:span[1]]
    fields: IntakeFields = {}

    relationship_match = re.search(
        rf"\b({'|'.join(_RELATIONSHIPS)})\b", segment, re.IGNORECASE
    )
    if relationship_match:
        fields["emergencyRelationship"] = _RELATIONSHIPS[relationship_match.group(1).lower()]

    skip = _NAME_FILLERS | frozenset(_RELATIONSHIPS)
    name_start = _EMERGENCY_MARKER.match(segment)
    candidates = []
    if relationship_match:
        candidates.append(segment[relationship_match.end():])
    if name_start:
        candidates.append(segment[name_start.end():])
    for candidate in candidates:
        parsed = parse_person_name(read_name_tokens(candidate, skip=skip))
        if parsed["first"]:
            fields.update(
                emergencyFirstName=parsed["first"],
                emergencyMiddleName=parsed["middle"],
                emergencyLastName=parsed["last"],
                emergencyExtensionName=parsed["extension"],
            )
            break

    mobiles = find_mobiles(segment)
    if mobiles:
        fields["emergencyMobile"] = mobiles[0][1]
    return {key: value for key, value in fields.items() if value}


# ============= Address =============

_ADDRESS_INTRODUCER = re.compile(
    r"\b(?:my address is|address is|address\s*:|i live at|i live in|i'm from|i am from|"
    r"resides? at|residing at|lives at|nakatira)\s*",
    re.IGNORECASE,
)
_ADDRESS_STOP = re.compile(
    r"\b(?:and|at|pero|but)\s+(?:my|ang)\b|\b(?:cellphone|mobile|phone|email)\b"
    r"|(?<!house )(?<!unit )(?<!lot )(?<!block )(?<!blk )(?<!room )(?<!door )\bnumber\b"
    r"|[!?\n]|\.(?:\s|$)",
    re.IGNORECASE,
)
_ADDRESS_ABBREVIATIONS = ("st", "ave", "rd", "blk", "brgy", "no", "sta", "sto", "bgy", "subd")
_HOUSE_HINT = re.compile(
    r"^\d|\b(?:street|st|avenue|ave|road|rd|drive|purok|sitio|blk|block|lot|phase|"
    r"subdivision|subd|village|zone|compound|house)\b",
    re.IGNORECASE,
)
_BARANGAY_PREFIX = re.compile(r"\bBarangay\s+", re.IGNORECASE)
_CITY_PREFIX = re.compile(r"^(?:City|Municipality|Town)\s+of\s+(?P<name>.+)$", re.IGNORECASE)
_CITY_SUFFIX = re.compile(r"^(?P<name>.+?\s+City)$", re.IGNORECASE)
_PROVINCE = re.compile(
    r"^(?:Province\s+of\s+(?P<prefixed>.+)|(?P<suffixed>.+?)\s+Province)$", re.IGNORECASE
)
_EMBEDDED_CITY = re.compile(
    r"\s+(?P<city>(?:(?:City|Municipality|Town)\s+of\s+.+)|(?:[\w'\-]+\s+City))$",
    re.IGNORECASE,
)
_ZIP = re.compile(r"^(?:zip code\s*:?\s*)?(?P<zip>\d{4})$", re.IGNORECASE)
_TRAILING_ZIP = re.compile(r"^(?P<rest>.+?)\s+(?P<zip>\d{4})$")
_ZIP_ANYWHERE = re.compile(r"\bzip code(?:\s+(?:is|ay|ko|po))*\s*:?\s*(?P<zip>\d{4})\b", re.IGNORECASE)
_LOWER_PARTICLES = frozenset({"of", "de", "del", "dela", "ng", "los", "las"})


def _title_words(value: str) -> str:
    words = value.split()
    titled = [
        word if index > 0 and word.lower() in _LOWER_PARTICLES else _capitalize_name(word)
        for index, word in enumerate(words)
    ]
    return " ".join(titled)


def _clean_component(value: str) -> str:
    value = re.sub(r"\b(?:po|ako|kami|lang)\b", " ", value, flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", value).strip(" .;:")


def _address_segment(text: str) -> str:
    match = _ADDRESS_INTRODUCER.search(text)
    if not match:
        return ""
    start = match.end()
    position = start
    while True:
        stop = _ADDRESS_STOP.search(text, position)
        if not stop:
            return text[start:]
        if stop.group(0).startswith("."):
            preceding = text[start:stop.start()].split()
            if preceding and preceding[-1].lower() in _ADDRESS_ABBREVIATIONS:
                position = stop.end()
                continue
        return text[start:stop.start()]


def _classify_component(component: str, index: int, fields: IntakeFields) -> None:
    zip_match = _ZIP.match(component)
    if zip_match and index > 0:
        fields.setdefault("addressZip", zip_match.group("zip"))
        return
    trailing_zip = _TRAILING_ZIP.match(component)
    if trailing_zip and index > 0:
        fields.setdefault("addressZip", trailing_zip.group("zip"))
        component = trailing_zip.group("rest")

    barangay = _BARANGAY_PREFIX.search(component)
    if barangay:
        before = component[:barangay.start()].strip()
        after = component[barangay.end():].strip()
        if before and index == 0 and _HOUSE_HINT.search(before):
            fields.setdefault("addressHouse", before)
        embedded = _EMBEDDED_CITY.search(after)
        if embedded:
            _classify_component(embedded.group("city"), index + 1, fields)
            after = after[:embedded.start()]
        if after:
            fields.setdefault("addressBarangay", _title_words(after))
        return

    city_prefix = _CITY_PREFIX.match(component)
    if city_prefix:
        fields.setdefault("addressCity", _title_words(component))
        return
    city_suffix = _CITY_SUFFIX.match(component)
    if city_suffix:
        fields.setdefault("addressCity", _title_words(city_suffix.group("name")))
        return
    province = _PROVINCE.match(component)
    if province:
        name = province.group("prefixed") or province.group("suffixed")
        fields.setdefault("addressProvince", _title_words(name))
        return
    if index == 0 and _HOUSE_HINT.search(component):
        fields.setdefault("addressHouse", component)


def _extract_address(text: str, settings: IntakeSettings) -> IntakeFields:
    fields: IntakeFields = {}
    segment = _address_segment(text)
    components = [_clean_component(part) for part in segment.split(",")]
    for index, component in enumerate(part for part in components if part):
        _classify_component(component, index, fields)

    zip_anywhere = _ZIP_ANYWHERE.search(text)
    if zip_anywhere:
        fields.setdefault("addressZip", zip_anywhere.group("zip"))
    if "addressProvince" not in fields and settings.default_province:
        fields["addressProvince"] = settings.default_province
    return {key: value for key, value in fields.items() if value}


# ============= Demographics and history =============

_DOB_MARKER = re.compile(
    r"\b(?:born(?:\s+on)?|date of birth|birth\s*date|birthday|dob)\b", re.IGNORECASE
)
_SEX_STATEMENT = re.compile(
    r"\b(?:sex|gender)\b(?:\s+(?:is|ay|ko|po|niya))*\s*:?\s*(?P<sex>male|female)\b"
    r"|\b(?:i am|i'm|ako ay|ako po ay)\s+(?:a\s+)?(?P<self>male|female)\b",
    re.IGNORECASE,
)
_NO_ALLERGIES = re.compile(
    r"\bno (?:known )?(?:drug |food )?allerg(?:y|ies)\b|\bnot allergic\b"
    r"|\bdon't have (?:any )?allerg(?:y|ies)\b|\bwithout allerg(?:y|ies)\b",
    re.IGNORECASE,
)
_ALLERGY_DETAIL = re.compile(
    r"\ballerg(?:ic|y|ies)\s+(?:to|sa|in)\s+(?P<detail>[^.!?;\n]+)", re.IGNORECASE
)
_ALLERGY_TOPIC = re.compile(r"\ballerg", re.IGNORECASE)
_ALLERGY_DETAIL_STOP = re.compile(r"\b(?:and (?:my|i|ang)|pero|but|po)\b|,", re.IGNORECASE)
_VACCINE_TOPIC = re.compile(r"\banti-rabies\b|\brabies\b|\bvaccin", re.IGNORECASE)
_INCIDENT_CONTEXT = re.compile(
    r"\b(?:bit|bite|bitten|scratch\w*|lick\w*|nibbl\w*|abrasion|happened|incident|occurred|attacked)\b",
    re.IGNORECASE,
)


def _extract_date_of_birth(text: str) -> str:
    marker = _DOB_MARKER.search(text)
    if not marker:
        return ""
    segment = text[marker.end():_sentence_end(text, marker.end())]
    return parse_date(segment)


def _extract_sex(text: str) -> str:
    match = _SEX_STATEMENT.search(text)
    if not match:
        return ""
    return (match.group("sex") or match.group("self")).capitalize()


def _extract_allergies(text: str) -> IntakeFields:
    detail = _ALLERGY_DETAIL.search(text)
    if detail and not is_negated(text, detail.start()):
        value = _ALLERGY_DETAIL_STOP.split(detail.group("detail"), maxsplit=1)[0]
        return {"hasAllergies": "Yes", "allergyDetails": value.strip()}
    if _NO_ALLERGIES.search(text) or (detail and is_negated(text, detail.start())):
        return {"hasAllergies": "No"}
    reply = answer_to_question(split_sentences(text), _ALLERGY_TOPIC)
    if reply is not None:
        return {"hasAllergies": "Yes" if reply else "No"}
    if find_positive(re.compile(r"\ballerg(?:y|ies|ic)\b", re.IGNORECASE), text):
        statements = [s for s in split_sentences(text) if not s.endswith("?")]
        if any(_ALLERGY_TOPIC.search(sentence) for sentence in statements):
            return {"hasAllergies": "Yes"}
    return {}


def _extract_vaccine_history(text: str) -> IntakeFields:
    sentences = split_sentences(text)
    for index, sentence in enumerate(sentences):
        lowered = sentence.lower()
        if not _VACCINE_TOPIC.search(lowered) or not is_patient_vaccine_sentence(lowered):
            continue
        if sentence.endswith("?"):
            reply = answer_to_question(sentences[index:index + 2], _VACCINE_TOPIC)
            if reply is None:
                continue
            if not reply:
                return {"historyOfRabiesVaccine": "No"}
            follow_up = sentences[index + 1]
            return {"historyOfRabiesVaccine": "Yes", "lastVaccineDate": parse_date(follow_up)}
        topic = PATIENT_VACCINE.search(lowered) or _VACCINE_TOPIC.search(lowered)
        if is_negated(lowered, topic.start()) or re.search(
            r"\b(?:never|not yet|hindi pa|wala pa)\b", lowered
        ):
            return {"historyOfRabiesVaccine": "No"}
        return {"historyOfRabiesVaccine": "Yes", "lastVaccineDate": parse_date(sentence)}
    return {}


def _extract_incident_date(text: str) -> str:
    for sentence in split_sentences(text):
        if _DOB_MARKER.search(sentence) or PATIENT_VACCINE.search(sentence.lower()):
            continue
        if _INCIDENT_CONTEXT.search(sentence):
            parsed = parse_date(sentence)
            if parsed:
                return parsed
    return ""


# ============= Extractor =============

def _without_span(text: str, span: tuple[int, int] | None) -> str:
    return text if span is None else text[:span[0]] + " " + text[span[1]:]


def stated_dates(text: str) -> IntakeFields:
    """Dates the transcript states for the birth and last-vaccine fields."""
    patient_text = _without_span(text, emergency_segment(text))
    return {
        "dateOfBirth": _extract_date_of_birth(patient_text),
        "lastVaccineDate": _extract_vaccine_history(text).get("lastVaccineDate", ""),
    }


def extract_identity_fields(text: str, settings: IntakeSettings) -> IntakeFields:
    """Extract identity, address, contact and history fields."""
    fields: IntakeFields = {}
    span = emergency_segment(text)
    patient_text = _without_span(text, span)

    fields.update(_extract_patient_name(patient_text))
    fields["dateOfBirth"] = _extract_date_of_birth(patient_text)
    fields["sex"] = _extract_sex(patient_text)
    fields.update(_extract_address(patient_text, settings))

    mobiles = find_mobiles(patient_text)
    if mobiles:
        fields["mobileNumber"] = mobiles[0][1]
    fields["email"] = _extract_email(patient_text)
    if span is not None:
        fields.update(_extract_emergency(text, span))

    fields.update(_extract_allergies(text))
    fields.update(_extract_vaccine_history(text))
    return {key: value for key, value in fields.items() if value}


def extract_incident_fields(text: str, findings: IncidentFindings) -> IntakeFields:
    """Render incident findings into the record's incident fields."""
    return {
        "dateOfIncident": _extract_incident_date(text),
        "typeOfExposure": ", ".join(findings.exposures),
        "bodyLocation": ", ".join(findings.locations),
        "animalType": findings.animal,
        "vaccinationStatus": scan_vaccination_status(text.lower()),
    }


class RuleBasedExtractor:
    """Deterministic field extractor over normalized transcript text."""

    def extract(
        self,
        normalized_text: str,
        settings: IntakeSettings | None = None,
    ) -> PartialIntakeRecord:
        active_settings = settings or get_settings()
        findings = scan_incident(normalized_text)
        fields = extract_identity_fields(normalized_text, active_settings)
        fields.update(extract_incident_fields(normalized_text, findings))
        return PartialIntakeRecord(fields=fields, incident=findings)


def extract(normalized_text: str, settings: IntakeSettings | None = None) -> PartialIntakeRecord:
    """Extract a partial intake record with the deterministic extractor."""
    return RuleBasedExtractor().extract(normalized_text, settings)

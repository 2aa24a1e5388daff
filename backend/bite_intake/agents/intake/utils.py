"""Utility functions shared by the extractor, risk rules and LLM backend."""
import re

_NEGATION_TERMS: tuple[str, ...] = (
    "no",
    "not",
    "non",
    "without",
    "never",
    "denies",
    "deny",
    "hindi",
    "di",
    "wala",
    "walang",
)

# Negation term followed by at most one intervening word.
_NEGATION_TAIL = re.compile(
    rf"(?:^|\b)(?:{'|'.join(_NEGATION_TERMS)}|\w+n't)\b(?:[\s\-]+[^\s.!?,;]+)?[\s\-]*$"
)

_SPEAKER_LABEL = re.compile(
    r"^\s*(?:nurse|patient|pasyente|doctor|doc|guardian|bantay|n|p)\s*:\s*",
    re.IGNORECASE,
)


def split_sentences(text: str) -> list[str]:
    """
    Split a transcript into sentences, dropping speaker labels.
    Terminal punctuation is kept so questions remain recognizable.
    """
    sentences: list[str] = []
    for line in re.split(r"\n+", text):
        for chunk in re.split(r"(?<=[.!?])\s+", line):
            cleaned = _SPEAKER_LABEL.sub("", chunk).strip()
            if cleaned:
                sentences.append(cleaned)
    return sentences


def is_negated(text: str, match_start: int) -> bool:
    """Return True when the phrase starting at match_start is negated."""
    window_start = max(0, match_start - 40)
    context = text[window_start:match_start].lower()
    return bool(_NEGATION_TAIL.search(context))


def find_positive(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    """Return the first non-negated match of pattern in text."""
    for match in pattern.finditer(text):
        if not is_negated(text, match.start()):
            return match
    return None


def find_negated(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    """Return the first negated match of pattern in text."""
    for match in pattern.finditer(text):
        if is_negated(text, match.start()):
            return match
    return None


def extract_json_from_text(text: str) -> str:
    """
    Extracts JSON string from text, processing markdown blocks and finding the first/last brace.
    """
    cleaned = text.strip()
    cleaned = cleaned.replace("<END_JSON>", "").strip()

    # Remove markdown code blocks
    if "```" in cleaned:
        pattern = r"```(?:json)?\s*(\{.*?\})\s*```"
        match = re.search(pattern, cleaned, re.DOTALL)
        if match:
            return match.group(1)

    # Fallback: Find first { and last }
    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        return cleaned[start:end + 1]

    return cleaned


_AFFIRMATIVE_REPLY = re.compile(r"^(?:yes|yeah|yup|opo|oo|meron|mayroon|tama)\b", re.IGNORECASE)
_NEGATIVE_REPLY = re.compile(r"^(?:no|nope|none|never|wala|hindi|di|negative)\b", re.IGNORECASE)


def answer_to_question(sentences: list[str], topic: re.Pattern[str]) -> bool | None:
    """
    Resolve a yes/no reply to the first question about a topic.
    Returns None when no such question was answered plainly.
    """
    for index, sentence in enumerate(sentences[:-1]):
        if not sentence.endswith("?") or not topic.search(sentence.lower()):
            continue
        reply = sentences[index + 1]
        if _NEGATIVE_REPLY.match(reply):
            return False
        if _AFFIRMATIVE_REPLY.match(reply):
            return True
    return None

from __future__ import annotations

import re

DEFAULT_COMPLAINT = "Emergency Call"
MAX_COMPLAINT_CHARS = 60
KEYWORD_SEPARATOR = " • "

# Acronyms stay upper-case when formatted.
ACRONYMS = frozenset({"stemi", "nstemi", "mi", "cva", "od", "gsw", "ams", "gcs"})

# Ordered by display priority.
MEDICAL_KEYWORDS: tuple[str, ...] = (
    "stemi",
    "nstemi",
    "mi",
    "cardiac arrest",
    "heart attack",
    "stroke",
    "cva",
    "seizure",
    "unconscious",
    "unresponsive",
    "chest pain",
    "difficulty breathing",
    "shortness of breath",
    "respiratory distress",
    "bleeding",
    "hemorrhage",
    "trauma",
    "head injury",
    "traumatic injury",
    "fall",
    "fallen",
    "fracture",
    "broken bone",
    "overdose",
    "od",
    "poisoning",
    "allergic reaction",
    "anaphylaxis",
    "diabetic emergency",
    "hypoglycemia",
    "hyperglycemia",
    "abdominal pain",
    "chest discomfort",
    "respiratory",
    "burn",
    "burns",
    "choking",
    "obstructed airway",
    "gunshot",
    "gsw",
    "stabbing",
    "penetrating trauma",
    "altered mental status",
    "ams",
    "confusion",
)

_SENTENCE_END = re.compile(r"[.!?]")
_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")


def clean_summary(summary: str | None) -> str:
    return _SURROUNDING_QUOTES.sub("", (summary or "").strip())


def _format_keyword(keyword: str) -> str:
    return " ".join(
        word.upper() if word in ACRONYMS else word[:1].upper() + word[1:]
        for word in keyword.split(" ")
    )


def find_medical_keywords(summary: str) -> list[str]:
    """Every known keyword in `summary`, formatted, without near-duplicates.

    Matching is plain substring matching, so short acronyms can hit inside
    longer words; "fall" and "fallen" count once.
    """

    lowered = summary.lower()
    found: list[str] = []
    for keyword in MEDICAL_KEYWORDS:
        if keyword not in lowered:
            continue
        duplicate = any(
            keyword in existing.lower() or existing.lower() in keyword
            for existing in found
        )
        if not duplicate:
            found.append(_format_keyword(keyword))
    return found


def extract_chief_complaint(summary: str | None) -> str:
    """Deterministic chief complaint for a call summary.

    Used whenever the language-model classifier is unavailable.
    """

    text = clean_summary(summary)
    if not text:
        return DEFAULT_COMPLAINT

    keywords = find_medical_keywords(text)
    if keywords:
        return KEYWORD_SEPARATOR.join(keywords)

    first_sentence = _SENTENCE_END.split(text, maxsplit=1)[0].strip()
    if 0 < len(first_sentence) <= MAX_COMPLAINT_CHARS:
        return first_sentence

    truncated = text[:MAX_COMPLAINT_CHARS].strip()
    return truncated + ("..." if len(text) > MAX_COMPLAINT_CHARS else "")

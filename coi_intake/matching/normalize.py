"""String normalization and similarity scoring for name comparison."""

import re

from rapidfuzz.distance import Levenshtein

from .name_tables import NameTables, load_name_tables

_PUNCTUATION_RE = re.compile(r"[.,'\"]")
_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Replace runs of whitespace with single spaces and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_name(name: str | None, tables: NameTables | None = None) -> str:
    """Normalize a name for comparison.

    Case-folds, strips punctuation, collapses whitespace and removes
    trailing business and generational suffixes ("Smith Roofing LLC"
    -> "smith", "John Smith Jr." -> "john smith"). A lone word is never
    removed. The function is idempotent.

    Args:
        name: Raw name text.
        tables: Name tables supplying the suffix list.

    Returns:
        Normalized name, or an empty string for empty input.
    """
    if not name:
        return ""
    tables = tables or load_name_tables()

    words = collapse_whitespace(_PUNCTUATION_RE.sub("", name.casefold())).split(" ")
    while len(words) > 1 and words[-1] in tables.name_suffixes:
        words.pop()
    return " ".join(words)


def levenshtein_distance(first: str, second: str) -> int:
    """Return the edit distance between two strings."""
    return Levenshtein.distance(first, second)


def similarity_score(first: str, second: str) -> int:
    """Score the similarity of two strings from 0 to 100.

    Computed as ``round((1 - distance / max_len) * 100)`` on the trimmed,
    lower-cased strings. Empty input scores 0.
    """
    if not first or not second:
        return 0

    a = first.lower().strip()
    b = second.lower().strip()
    if a == b:
        return 100

    max_length = max(len(a), len(b))
    if max_length == 0:
        return 100
    return round((1 - levenshtein_distance(a, b) / max_length) * 100)


def is_business_styled(name: str, tables: NameTables | None = None) -> bool:
    """Check whether a name carries business wording (LLC, Roofing, ...)."""
    tables = tables or load_name_tables()
    return any(
        contains_indicator(word, tables.business_indicators)
        for word in _PUNCTUATION_RE.sub("", name.lower()).split()
    )


def contains_indicator(word: str, indicators: tuple[str, ...]) -> bool:
    """Match one lower-case word against business indicators.

    Indicators of three letters or fewer ("co", "inc") must equal the
    word; longer ones may appear anywhere in it.
    """
    word = word.strip(".,;:'\"()")
    for indicator in indicators:
        if len(indicator) <= 3:
            if word == indicator:
                return True
        elif indicator in word:
            return True
    return False

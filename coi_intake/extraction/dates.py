"""Coverage period extraction.

Certificates list policy periods in table rows, so the strongest signal
is two dates printed side by side. Weaker signals are tried in order:
any two dates roughly a policy term apart, then keyword labels. When
only the start is known, the end is synthesized one term later.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from coi_intake.utils.config import ExtractionConfig
from coi_intake.utils.logger import get_logger

from .models import DateRange

logger = get_logger(__name__)

_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?"
    r"|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)

DATE_TOKEN = (
    r"(?:\d{1,2}[/\-]\d{1,2}[/\-](?:\d{4}|\d{2})(?!\d)"
    rf"|\b{_MONTHS}\.?\s+\d{{1,2}},?\s+\d{{4}}"
    rf"|\d{{1,2}}\s+{_MONTHS}\.?,?\s+\d{{4}})"
)

_DATE_RE = re.compile(rf"(?<![\d/\-]){DATE_TOKEN}", re.IGNORECASE)

DATE_FORMATS: list[str] = [
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
    "%m-%d-%y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
]

_EFFECTIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"POLICY\s*EFF[^\d]*?({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bEFF[\s\S]{{0,20}}?({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\beffective\s*(?:date)?\s*:?\s*({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bpolicy\s+period\s*:?\s*({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bfrom\s*:?\s*({DATE_TOKEN})", re.IGNORECASE),
]

_EXPIRATION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"POLICY\s*EXP[^\d]*?({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bEXP[\s\S]{{0,20}}?({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bexpir(?:ation|es|y)?\s*(?:date)?\s*:?\s*({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bto\s*:?\s*({DATE_TOKEN})", re.IGNORECASE),
    re.compile(rf"\bends?\s*:?\s*({DATE_TOKEN})", re.IGNORECASE),
]

_RANGE_RE = re.compile(
    rf"({DATE_TOKEN})\s*(?:to|through|thru|-)\s*({DATE_TOKEN})", re.IGNORECASE
)


def parse_date(value: str) -> date | None:
    """Parse a date written in one of the certificate formats.

    Args:
        value: Date text such as ``"1/15/2024"`` or ``"January 15, 2024"``.

    Returns:
        The calendar date, or ``None`` if the text is not a valid date.
    """
    cleaned = re.sub(r"\s+", " ", value.replace(",", " ").replace(".", " ")).strip()
    cleaned = re.sub(r"^Sept\b", "Sep", cleaned, flags=re.IGNORECASE)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: date) -> str:
    """Format a date as month/day/year without leading zeros."""
    return f"{value.month}/{value.day}/{value.year}"


@dataclass(frozen=True)
class DateToken:
    """A date as it appears in the text, with its position."""

    text: str
    start: int
    end: int


def find_dates(text: str) -> list[DateToken]:
    """Return every date token in the text in order of appearance."""
    return [DateToken(m.group(0), m.start(), m.end()) for m in _DATE_RE.finditer(text)]


def _adjacent_pair(text: str, config: ExtractionConfig) -> DateRange | None:
    tokens = find_dates(text)
    for first, second in zip(tokens, tokens[1:]):
        if not text[first.end : second.start].strip():
            return DateRange(first.text, second.text, "adjacent_pair")
    return None


def _policy_term_pair(text: str, config: ExtractionConfig) -> DateRange | None:
    distinct: list[str] = []
    for token in find_dates(text):
        if token.text not in distinct:
            distinct.append(token.text)

    parsed = [(value, parse_date(value)) for value in distinct]
    for i, (first_text, first) in enumerate(parsed):
        if first is None:
            continue
        for second_text, second in parsed[i + 1 :]:
            if second is None:
                continue
            gap = abs((second - first).days)
            if config.min_term_days <= gap <= config.max_term_days:
                if first <= second:
                    return DateRange(first_text, second_text, "policy_term_pair")
                return DateRange(second_text, first_text, "policy_term_pair")
    return None


def _first_group(patterns: list[re.Pattern[str]], text: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def _labeled_keywords(text: str, config: ExtractionConfig) -> DateRange | None:
    effective = _first_group(_EFFECTIVE_PATTERNS, text)
    expiration = _first_group(_EXPIRATION_PATTERNS, text)

    if effective is None or expiration is None:
        match = _RANGE_RE.search(text)
        if match:
            effective = effective or match.group(1)
            expiration = expiration or match.group(2)

    if effective is None and expiration is None:
        return None
    return DateRange(effective, expiration, "labeled_keywords")


DateStrategy = Callable[[str, ExtractionConfig], DateRange | None]

DATE_STRATEGIES: list[tuple[str, DateStrategy]] = [
    ("adjacent_pair", _adjacent_pair),
    ("policy_term_pair", _policy_term_pair),
    ("labeled_keywords", _labeled_keywords),
]


def extract_dates(text: str, config: ExtractionConfig | None = None) -> DateRange:
    """Extract the effective and expiration dates of a certificate.

    Args:
        text: Certificate text.
        config: Extraction settings (policy term bounds).

    Returns:
        The date range; either side may be ``None``.
    """
    config = config or ExtractionConfig()
    result = DateRange()

    for name, strategy in DATE_STRATEGIES:
        found = strategy(text, config)
        if found is not None:
            logger.debug(
                "Dates via %s: %s to %s", name, found.effective, found.expiration
            )
            result = found
            break

    if result.effective and not result.expiration:
        start = parse_date(result.effective)
        if start is not None:
            end = start + timedelta(days=config.synthesized_term_days)
            result = DateRange(result.effective, format_date(end), "synthesized")
            logger.debug("Synthesized expiration %s", result.expiration)

    return result

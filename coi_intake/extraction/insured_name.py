"""Insured party extraction.

The insured is located by an ordered cascade of named strategies grouped
into tiers. Structural cues on the standard certificate layout are
tried first, then generic ``label: value`` fields, then a scan of the
top of the document for anything shaped like a person's name. Within
the cascade the first strategy that yields a candidate wins outright.

Two names come out: ``raw_name`` is the first candidate found, company
names included, and ``person_name`` is a candidate that passes the
person-name check and can be matched against employees.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from coi_intake.matching.name_tables import NameTables, load_name_tables
from coi_intake.matching.normalize import collapse_whitespace, contains_indicator
from coi_intake.utils.config import ExtractionConfig
from coi_intake.utils.logger import get_logger

logger = get_logger(__name__)

_COMPANY_SUFFIXES = (
    r"(?:LLC|Inc|Corp|Ltd|Co\.|Company|Enterprises|Services|Roofing"
    r"|Construction|Contracting|Carpentry)"
)

_EMAIL_RE = re.compile(r"@[a-z0-9.\-]+\.[a-z]{2,}", re.IGNORECASE)
_ADDRESS_RE = re.compile(r"\d{2,5}\s+[A-Za-z]")
_COMPANY_LINE_RE = re.compile(
    rf"^[ \t]*([A-Za-z][A-Za-z0-9 \t.,&\-']*?"
    rf"\b(?:{_COMPANY_SUFFIXES}|dba[ \t]+[A-Za-z0-9\-]+)(?![A-Za-z])[^\n]*)",
    re.IGNORECASE | re.MULTILINE,
)
_NAME_BEFORE_ADDRESS_RE = re.compile(
    r"\b([A-Z][a-z]+[ \t]+[A-Z][a-z]+)[ \t]*\n?[ \t]*\d{2,5}[ \t]+[A-Za-z]"
)
_INSURED_BEFORE_ADDRESS_RE = re.compile(
    r"(?i:\bINSURED\b)\s+([A-Za-z][A-Za-z0-9\s.,&\-']{1,80}?)"
    r"\s+(?:\d{2,5}\s+[A-Za-z]|[A-Z]{2},?\s+\d{5})"
)
_INSURED_COMPANY_RE = re.compile(
    rf"(?i:\bINSURED\b)[\s\S]{{0,100}}?\b([A-Z][A-Za-z0-9 \t.,&\-']*?"
    rf"\b(?i:{_COMPANY_SUFFIXES})(?![A-Za-z])[^\n]*)"
)
_INSURED_LINE_RE = re.compile(r"\bINSURED\b[ \t]*(?:\n\s*)?([A-Za-z][^\n]*)", re.IGNORECASE)
_INSURED_FALLBACK_RE = re.compile(r"\bINSURED\b\s+([A-Za-z][^\n]{2,50})", re.IGNORECASE)
_LABELED_RE = re.compile(
    r"\b(?:named\s+insured|insured|contractor|policy\s*holder)\s*:\s*([A-Za-z][^\n]*)",
    re.IGNORECASE,
)
_CAPITALIZED_RUN_RE = re.compile(
    r"\b[A-Z][a-zA-Z'\-]*[a-z](?:[ \t]+[A-Z][a-zA-Z'\-]*[a-z])+"
)
_NAME_CHARS_RE = re.compile(r"[A-Za-z][A-Za-z0-9 \t&.,'\-]*")
_ZIP_TAIL_RE = re.compile(r"\s+\d{5}.*$")
_LETTER_PREFIX_RE = re.compile(r"^[A-Z]\s+(?=[A-Z])")
_FORBIDDEN_CHARS_RE = re.compile(r"[&@#$%]")
_HOUSE_NUMBER_TAIL_RE = re.compile(r"\d[ \t]*$")


@dataclass(frozen=True)
class NameCandidate:
    """A name found by one strategy."""

    text: str
    strategy: str


@dataclass(frozen=True)
class InsuredName:
    """Outcome of insured name extraction."""

    person_name: str | None = None
    raw_name: str | None = None
    strategy: str | None = None


@dataclass(frozen=True)
class NameStrategy:
    """A named, independently callable step of the extraction cascade."""

    name: str
    find: Callable[[str], NameCandidate | None]


class InsuredNameExtractor:
    """Locates the insured party in certificate text.

    Args:
        tables: Name reference tables. Defaults to the packaged tables.
        config: Extraction settings (scan window sizes).
        log: Logger receiving trace output.
    """

    def __init__(
        self,
        tables: NameTables | None = None,
        config: ExtractionConfig | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.tables = tables or load_name_tables()
        self.config = config or ExtractionConfig()
        self.log = log or logger
        self.tiers: list[tuple[str, list[NameStrategy]]] = [
            (
                "layout",
                [
                    NameStrategy("after_producer_email", self.after_producer_email),
                    NameStrategy("insured_before_address", self.insured_before_address),
                    NameStrategy("insured_company_suffix", self.insured_company_suffix),
                    NameStrategy("insured_section_line", self.insured_section_line),
                ],
            ),
            ("labeled", [NameStrategy("labeled_field", self.labeled_field)]),
            ("scan", [NameStrategy("person_name_scan", self.person_name_scan)]),
            ("fallback", [NameStrategy("insured_fallback_line", self.insured_fallback_line)]),
        ]

    def strategy(self, name: str) -> NameStrategy:
        """Look up a strategy by name."""
        for _, strategies in self.tiers:
            for strategy in strategies:
                if strategy.name == name:
                    return strategy
        raise KeyError(name)

    def extract(self, text: str) -> InsuredName:
        """Extract the insured person and raw insured names.

        Args:
            text: Certificate text.

        Returns:
            The extracted names; either may be ``None``.
        """
        raw = self._run_tiers(text, ("layout", "labeled"))
        person = raw.text if raw and self.looks_like_person_name(raw.text) else None
        strategy = raw.strategy if raw else None

        if person is None:
            scanned = self._run_tiers(text, ("scan",))
            if scanned is not None:
                person = scanned.text
                if raw is None:
                    raw = scanned
                    strategy = scanned.strategy

        if raw is None:
            raw = self._run_tiers(text, ("fallback",))
            strategy = raw.strategy if raw else None

        self.log.debug(
            "Insured name: person=%r raw=%r via %s",
            person,
            raw.text if raw else None,
            strategy,
        )
        return InsuredName(
            person_name=person,
            raw_name=raw.text if raw else None,
            strategy=strategy,
        )

    def _run_tiers(self, text: str, tier_names: tuple[str, ...]) -> NameCandidate | None:
        for tier_name, strategies in self.tiers:
            if tier_name not in tier_names:
                continue
            for strategy in strategies:
                candidate = strategy.find(text)
                if candidate is not None:
                    return candidate
        return None

    # Predicates

    def looks_like_person_name(self, name: str) -> bool:
        """Check whether a candidate looks like a person rather than a company.

        Requires 2 to 4 words without digits, business wording or the
        characters ``& @ # $ %``, with first and last words of at least
        two characters.
        """
        words = name.split()
        if not 2 <= len(words) <= 4:
            return False
        if any(ch.isdigit() for ch in name) or _FORBIDDEN_CHARS_RE.search(name):
            return False
        if any(
            contains_indicator(word.lower(), self.tables.business_indicators)
            for word in words
        ):
            return False
        return len(words[0]) >= 2 and len(words[-1]) >= 2

    def looks_like_valid_name(self, name: str) -> bool:
        """Check whether a candidate is a name (person or company), not a label."""
        cleaned = name.strip()
        if len(cleaned) < 3 or cleaned.isdigit():
            return False
        first_word = cleaned.split()[0].lower().strip(".,:;")
        return first_word not in self.tables.skip_labels

    def looks_like_company_name(self, name: str) -> bool:
        return any(
            contains_indicator(word.lower(), self.tables.company_indicators)
            for word in name.split()
        )

    def is_skip_phrase(self, text: str) -> bool:
        lower = text.lower()
        return any(phrase in lower for phrase in self.tables.skip_phrases)

    def _has_address_word(self, name: str) -> bool:
        return any(
            word.lower().strip(".,") in self.tables.address_words for word in name.split()
        )

    # Layout tier

    def after_producer_email(self, text: str) -> NameCandidate | None:
        """Read the insured block that follows the producer's email address.

        On standard certificates the producer block ends with a contact
        email and the insured block follows it: a name, then an address.
        """
        email = _EMAIL_RE.search(text)
        if email is None:
            return None
        window = text[email.end() : email.end() + self.config.producer_window]
        address = _ADDRESS_RE.search(window)

        for match in _COMPANY_LINE_RE.finditer(window):
            if address is not None and match.start(1) >= address.start():
                break
            candidate = collapse_whitespace(match.group(1))
            if len(candidate) >= 5 and not self.is_skip_phrase(candidate):
                return NameCandidate(candidate, "after_producer_email")

        match = _NAME_BEFORE_ADDRESS_RE.search(window)
        if match:
            candidate = match.group(1).strip()
            if not self._has_address_word(candidate) and self.looks_like_valid_name(candidate):
                return NameCandidate(candidate, "after_producer_email")
        return None

    def insured_before_address(self, text: str) -> NameCandidate | None:
        """Take the text between the INSURED label and a street address or state/ZIP."""
        for match in _INSURED_BEFORE_ADDRESS_RE.finditer(text):
            candidate = collapse_whitespace(match.group(1))
            if (
                len(candidate) >= 5
                and not self.is_skip_phrase(candidate)
                and self.looks_like_valid_name(candidate)
                and (" " in candidate or self.looks_like_company_name(candidate))
            ):
                return NameCandidate(candidate, "insured_before_address")
        return None

    def insured_company_suffix(self, text: str) -> NameCandidate | None:
        """Find a business name with a company suffix in the INSURED section."""
        for match in _INSURED_COMPANY_RE.finditer(text):
            candidate = collapse_whitespace(_ZIP_TAIL_RE.sub("", match.group(1)))
            if (
                len(candidate) >= 5
                and self.looks_like_company_name(candidate)
                and self.looks_like_valid_name(candidate)
                and not self.is_skip_phrase(candidate)
            ):
                return NameCandidate(candidate, "insured_company_suffix")
        return None

    def insured_section_line(self, text: str) -> NameCandidate | None:
        """Use the first non-label line after the INSURED label."""
        for match in _INSURED_LINE_RE.finditer(text):
            line = _LETTER_PREFIX_RE.sub("", match.group(1).strip())
            candidate = collapse_whitespace(_ZIP_TAIL_RE.sub("", line))
            if self.looks_like_valid_name(candidate) and not self.is_skip_phrase(candidate):
                return NameCandidate(candidate, "insured_section_line")
        return None

    # Labeled tier

    def labeled_field(self, text: str) -> NameCandidate | None:
        """Read ``insured:``, ``contractor:`` or ``policyholder:`` fields."""
        for match in _LABELED_RE.finditer(text):
            chars = _NAME_CHARS_RE.match(match.group(1))
            if chars is None:
                continue
            value = re.split(r"\s+\d", chars.group(0), maxsplit=1)[0]
            candidate = collapse_whitespace(value).strip(" ,.-")
            if (
                " " in candidate
                and self.looks_like_valid_name(candidate)
                and not self.is_skip_phrase(candidate)
            ):
                return NameCandidate(candidate, "labeled_field")
        return None

    # Scan tier

    def person_name_scan(self, text: str) -> NameCandidate | None:
        """Scan the top of the document for a capitalised person name.

        Every 2 to 4 word window of each capitalised run is tried, longest
        first. Windows that hit the exclusion list, a form label, company
        wording or an address word are skipped and scanning continues.
        Runs that follow a house number are street names.
        """
        window = text[: self.config.scan_window]
        for run in _CAPITALIZED_RUN_RE.finditer(window):
            if _HOUSE_NUMBER_TAIL_RE.search(window, 0, run.start()):
                continue
            words = run.group(0).split()
            for start in range(len(words)):
                for size in (4, 3, 2):
                    if start + size > len(words):
                        continue
                    candidate = " ".join(words[start : start + size])
                    if self._accept_scanned(candidate):
                        return NameCandidate(candidate, "person_name_scan")
        return None

    def _accept_scanned(self, candidate: str) -> bool:
        if not self.looks_like_person_name(candidate):
            return False
        if any(word.lower() in self.tables.skip_labels for word in candidate.split()):
            return False
        if self._has_address_word(candidate):
            return False
        if self.looks_like_company_name(candidate):
            return False
        return not self.tables.is_excluded(candidate)

    # Fallback

    def insured_fallback_line(self, text: str) -> NameCandidate | None:
        """Accept any plausible text after INSURED as a raw name."""
        for match in _INSURED_FALLBACK_RE.finditer(text):
            candidate = collapse_whitespace(_ZIP_TAIL_RE.sub("", match.group(1)))
            if self.looks_like_valid_name(candidate):
                return NameCandidate(candidate, "insured_fallback_line")
        return None


def extract_insured_name(
    text: str,
    tables: NameTables | None = None,
    config: ExtractionConfig | None = None,
) -> InsuredName:
    """Extract the insured names from certificate text with default settings."""
    return InsuredNameExtractor(tables=tables, config=config).extract(text)

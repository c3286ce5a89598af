"""Regex rules for the scalar certificate fields.

Covers policy numbers, insurer names, coverage category detection and
dollar amounts. Each field has an ordered list of patterns; the first
pattern producing an acceptable value wins.
"""

import re

from coi_intake.utils.logger import get_logger

from .models import DocumentType

logger = get_logger(__name__)


# Pattern definitions: (regex, flags)
_POLICY_PATTERNS: list[tuple[str, int]] = [
    (r"policy\s*(?:number|no\.?|#)\s*:?\s*([A-Z0-9][A-Z0-9\-]*)", re.IGNORECASE),
    (r"policy\s*:?\s*([A-Z0-9\-]{6,})", re.IGNORECASE),
    (r"certificate\s*(?:number|no\.?|#)\s*:?\s*([A-Z0-9][A-Z0-9\-]*)", re.IGNORECASE),
    (r"\b([A-Z]{2,4}[\-\s]?\d{6,})\b", 0),
]

_INSURER_PATTERNS: list[tuple[str, int]] = [
    (r"\binsurer(?:\s+[A-Z])?\s*:\s*([A-Za-z0-9 \t.,&\-']+?)\s*(?:\n|naic|$)", re.IGNORECASE | re.MULTILINE),
    (r"\binsurance\s+company\s*:\s*([A-Za-z0-9 \t.,&\-']+?)\s*$", re.IGNORECASE | re.MULTILINE),
    (r"\bcarrier\s*:?\s*([A-Za-z0-9 \t.,&\-']+?)\s*$", re.IGNORECASE | re.MULTILINE),
    (r"\bunderwritten\s+by\s*:?\s*([A-Za-z0-9 \t.,&\-']+?)\s*$", re.IGNORECASE | re.MULTILINE),
]

# Evaluated in order; the first category with a keyword hit wins.
DOCUMENT_TYPE_KEYWORDS: list[tuple[DocumentType, tuple[str, ...]]] = [
    (DocumentType.WORKERS_COMP, ("workers compensation", "workers comp", "wc coverage")),
    (DocumentType.GENERAL_LIABILITY, ("general liability", "cgl", "commercial general")),
    (DocumentType.AUTO, ("auto liability", "automobile", "vehicle")),
    (DocumentType.UMBRELLA, ("umbrella", "excess liability")),
]

_AMOUNT_RE = re.compile(r"\$\s*(\d[\d,]*(?:\.\d{2})?)")
_APOSTROPHE_RE = re.compile(r"\bworkers?['\u2019]?s?(?![a-z])")


def extract_policy_number(text: str) -> str | None:
    """Extract the policy number.

    Labeled values must contain a digit, so column headings such as
    "POLICY NUMBER  POLICY EFF" are not mistaken for a number.

    Args:
        text: Certificate text.

    Returns:
        The policy number, or ``None`` if not found.
    """
    for pattern, flags in _POLICY_PATTERNS:
        for match in re.finditer(pattern, text, flags):
            value = match.group(1).strip()
            if any(ch.isdigit() for ch in value):
                logger.debug("Found policy number: %s", value)
                return value
    return None


def extract_insurer_name(text: str, max_length: int = 100) -> str | None:
    """Extract the insurance carrier's name.

    Args:
        text: Certificate text.
        max_length: Maximum length of the returned name.

    Returns:
        Whitespace-collapsed insurer name, or ``None`` if not found.
    """
    for pattern, flags in _INSURER_PATTERNS:
        match = re.search(pattern, text, flags)
        if match:
            name = re.sub(r"\s+", " ", match.group(1)).strip()
            if len(name) >= 3 and re.search(r"[A-Za-z]", name):
                return name[:max_length]
    return None


def detect_document_type(text: str) -> DocumentType:
    """Classify the certificate by its coverage keywords."""
    lower = _APOSTROPHE_RE.sub("workers", text.lower())
    for document_type, keywords in DOCUMENT_TYPE_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return document_type
    return DocumentType.UNKNOWN


def extract_amounts(text: str) -> list[float]:
    """Return every positive dollar amount, largest first."""
    amounts: list[float] = []
    for match in _AMOUNT_RE.finditer(text):
        try:
            amount = float(match.group(1).replace(",", ""))
        except ValueError:
            continue
        if amount > 0:
            amounts.append(amount)
    return sorted(amounts, reverse=True)

"""Result types produced by the document parsers."""

from dataclasses import dataclass, field
from enum import StrEnum

# Marker the text extraction step sends when a document is image-only.
NO_EXTRACTABLE_TEXT = "IMAGE_FILE"


class DocumentType(StrEnum):
    """Coverage category of a certificate."""

    WORKERS_COMP = "WORKERS_COMP"
    GENERAL_LIABILITY = "GENERAL_LIABILITY"
    AUTO = "AUTO"
    UMBRELLA = "UMBRELLA"
    UNKNOWN = "UNKNOWN"


class CoverageKind(StrEnum):
    """Coverage amount slots on a certificate."""

    GENERAL_LIABILITY = "general_liability"
    WORKERS_COMP = "workers_comp"
    AUTO_LIABILITY = "auto_liability"
    UMBRELLA = "umbrella"


COVERAGE_SLOT: dict[DocumentType, CoverageKind] = {
    DocumentType.GENERAL_LIABILITY: CoverageKind.GENERAL_LIABILITY,
    DocumentType.UNKNOWN: CoverageKind.GENERAL_LIABILITY,
    DocumentType.WORKERS_COMP: CoverageKind.WORKERS_COMP,
    DocumentType.AUTO: CoverageKind.AUTO_LIABILITY,
    DocumentType.UMBRELLA: CoverageKind.UMBRELLA,
}

CONFIDENCE_WEIGHTS: dict[str, int] = {
    "insured_name": 25,
    "policy_number": 20,
    "expiration_date": 20,
    "effective_date": 15,
    "insurer_name": 10,
    "document_type": 10,
}


@dataclass(frozen=True)
class ParsedCertificate:
    """Structured fields extracted from one certificate of insurance.

    ``insured_name`` is only set for a candidate that looks like a person;
    ``raw_insured_name`` keeps whatever name was found first, company
    names included. ``text_extractable`` is ``False`` when the document
    carried no text at all, as opposed to text in which nothing was found.
    """

    insured_name: str | None = None
    raw_insured_name: str | None = None
    policy_number: str | None = None
    effective_date: str | None = None
    expiration_date: str | None = None
    insurer_name: str | None = None
    coverage_amounts: dict[CoverageKind, float] = field(default_factory=dict)
    document_type: DocumentType = DocumentType.UNKNOWN
    confidence: int = 0
    raw_text_excerpt: str = ""
    text_extractable: bool = True

    @classmethod
    def unextractable(cls) -> "ParsedCertificate":
        """Build the empty, flagged result for documents without text."""
        return cls(raw_text_excerpt=NO_EXTRACTABLE_TEXT, text_extractable=False)


def calculate_confidence(
    insured_name: str | None,
    policy_number: str | None,
    effective_date: str | None,
    expiration_date: str | None,
    insurer_name: str | None,
    document_type: DocumentType,
) -> int:
    """Weighted sum of the fields that were found, capped at 100."""
    present = {
        "insured_name": insured_name is not None,
        "policy_number": policy_number is not None,
        "effective_date": effective_date is not None,
        "expiration_date": expiration_date is not None,
        "insurer_name": insurer_name is not None,
        "document_type": document_type != DocumentType.UNKNOWN,
    }
    score = sum(CONFIDENCE_WEIGHTS[name] for name, found in present.items() if found)
    return min(score, 100)


@dataclass(frozen=True)
class DateRange:
    """Effective and expiration dates as written in the source text."""

    effective: str | None = None
    expiration: str | None = None
    strategy: str | None = None


@dataclass(frozen=True)
class ParsedContract:
    """Fields extracted from a contract document."""

    party_names: list[str] = field(default_factory=list)
    effective_date: str | None = None
    signature_date: str | None = None
    contract_type: str | None = None
    key_terms: list[str] = field(default_factory=list)
    raw_text_excerpt: str = ""
    confidence: int = 0

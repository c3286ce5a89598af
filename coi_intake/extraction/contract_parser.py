"""Contract document parsing and document routing."""

import logging
import re

from coi_intake.errors import ensure_text
from coi_intake.matching.name_tables import NameTables
from coi_intake.utils.config import ExtractionConfig
from coi_intake.utils.logger import get_logger

from .certificate_parser import CertificateParser
from .dates import extract_dates
from .document_classifier import DocumentClassifier, DocumentKind
from .models import NO_EXTRACTABLE_TEXT, ParsedCertificate, ParsedContract

logger = get_logger(__name__)

_PARTY_RE = re.compile(r"between\s+([A-Za-z0-9\s.,&\-']+?)\s+(?:and|,)", re.IGNORECASE)
_TERM_RE = re.compile(r"(?:\d+\.|\u2022|-)\s*([A-Z][^.]{10,100}\.)")

# Evaluated in order; the first type with a keyword hit wins.
CONTRACT_TYPE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("EMPLOYMENT", ("employment agreement", "employment contract")),
    ("NDA", ("non-disclosure", "nda", "confidentiality")),
    ("CONTRACTOR", ("independent contractor", "subcontractor")),
    ("SERVICE", ("service agreement", "services agreement")),
]

CONTRACT_CONFIDENCE_WEIGHTS: dict[str, int] = {
    "party_names": 30,
    "effective_date": 20,
    "contract_type": 25,
    "key_terms": 25,
}

MAX_KEY_TERMS = 10


def detect_contract_type(text: str) -> str | None:
    """Return the first contract type whose keywords occur as whole words."""
    for contract_type, keywords in CONTRACT_TYPE_KEYWORDS:
        if any(re.search(rf"\b{re.escape(k)}\b", text, re.IGNORECASE) for k in keywords):
            return contract_type
    return None


class ContractParser:
    """Extracts parties, dates, type and key terms from a contract.

    Args:
        config: Extraction settings.
        log: Logger receiving trace output.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.log = log or logger

    def parse(self, text: str) -> ParsedContract:
        """Parse one contract.

        Args:
            text: Extracted document text.

        Returns:
            Parsed contract fields.

        Raises:
            ExtractionFailure: If ``text`` shows that text extraction failed.
            UnsupportedInput: If the document carries no text.
        """
        text = ensure_text(text, NO_EXTRACTABLE_TEXT)

        party_names = [
            name
            for name in (m.group(1).strip() for m in _PARTY_RE.finditer(text))
            if len(name) >= 3
        ]
        # The closing date of the range stands in for the signature date.
        dates = extract_dates(text, self.config)
        contract_type = detect_contract_type(text)
        key_terms = [m.group(1).strip() for m in _TERM_RE.finditer(text)][:MAX_KEY_TERMS]

        present = {
            "party_names": bool(party_names),
            "effective_date": dates.effective is not None,
            "contract_type": contract_type is not None,
            "key_terms": bool(key_terms),
        }
        confidence = sum(
            CONTRACT_CONFIDENCE_WEIGHTS[name] for name, found in present.items() if found
        )

        self.log.info(
            "Parsed contract: parties=%d type=%s terms=%d confidence=%d",
            len(party_names),
            contract_type,
            len(key_terms),
            confidence,
        )
        return ParsedContract(
            party_names=party_names,
            effective_date=dates.effective,
            signature_date=dates.expiration,
            contract_type=contract_type,
            key_terms=key_terms,
            raw_text_excerpt=text[: self.config.excerpt_length],
            confidence=confidence,
        )


def parse_document(
    text: str,
    config: ExtractionConfig | None = None,
    tables: NameTables | None = None,
    classifier: DocumentClassifier | None = None,
) -> ParsedCertificate | ParsedContract:
    """Route a document to the certificate or contract parser.

    Documents without text are returned as an unextractable certificate,
    since only certificates arrive from image uploads.

    Args:
        text: Extracted document text.
        config: Extraction settings.
        tables: Name reference tables for the certificate parser.
        classifier: Document kind classifier. Defaults to built-in identifiers.

    Returns:
        The parsed certificate or contract.
    """
    certificate_parser = CertificateParser(config, tables)
    if not isinstance(text, str) or text == NO_EXTRACTABLE_TEXT or not text.strip():
        return certificate_parser.parse(text)

    classifier = classifier or DocumentClassifier()
    match = classifier.classify(text)
    if match.kind == DocumentKind.COI:
        return certificate_parser.parse(text)
    return ContractParser(config).parse(text)

"""Certificate of insurance parser.

Runs the individual field extractors over the text of one certificate
and assembles a :class:`ParsedCertificate` with a confidence score.
"""

import logging

from coi_intake.errors import UnsupportedInput, ensure_text
from coi_intake.matching.name_tables import NameTables, load_name_tables
from coi_intake.utils.config import ExtractionConfig
from coi_intake.utils.logger import get_logger

from .dates import extract_dates
from .field_rules import (
    detect_document_type,
    extract_amounts,
    extract_insurer_name,
    extract_policy_number,
)
from .insured_name import InsuredNameExtractor
from .models import (
    COVERAGE_SLOT,
    NO_EXTRACTABLE_TEXT,
    ParsedCertificate,
    calculate_confidence,
)

logger = get_logger(__name__)


class CertificateParser:
    """Extracts structured fields from certificate text.

    Args:
        config: Extraction settings.
        tables: Name reference tables. Defaults to the packaged tables.
        log: Logger receiving trace output.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        tables: NameTables | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.tables = tables or load_name_tables()
        self.log = log or logger
        self.name_extractor = InsuredNameExtractor(self.tables, self.config, self.log)

    def parse(self, text: str) -> ParsedCertificate:
        """Parse one certificate.

        Args:
            text: Extracted document text, or the no-text marker.

        Returns:
            Parsed fields. Fields that were not found are ``None``.

        Raises:
            ExtractionFailure: If ``text`` shows that text extraction failed.
        """
        try:
            text = ensure_text(text, NO_EXTRACTABLE_TEXT)
        except UnsupportedInput:
            self.log.info("Document has no extractable text")
            return ParsedCertificate.unextractable()

        names = self.name_extractor.extract(text)
        dates = extract_dates(text, self.config)
        policy_number = extract_policy_number(text)
        insurer_name = extract_insurer_name(text, self.config.insurer_max_length)
        document_type = detect_document_type(text)

        amounts = extract_amounts(text)
        coverage = {COVERAGE_SLOT[document_type]: amounts[0]} if amounts else {}

        confidence = calculate_confidence(
            insured_name=names.person_name,
            policy_number=policy_number,
            effective_date=dates.effective,
            expiration_date=dates.expiration,
            insurer_name=insurer_name,
            document_type=document_type,
        )

        self.log.info(
            "Parsed certificate: insured=%s policy=%s type=%s confidence=%d",
            names.person_name or names.raw_name,
            policy_number,
            document_type,
            confidence,
        )

        return ParsedCertificate(
            insured_name=names.person_name,
            raw_insured_name=names.raw_name,
            policy_number=policy_number,
            effective_date=dates.effective,
            expiration_date=dates.expiration,
            insurer_name=insurer_name,
            coverage_amounts=coverage,
            document_type=document_type,
            confidence=confidence,
            raw_text_excerpt=text[: self.config.excerpt_length],
        )

"""Certificate intake workflow.

Parses an uploaded certificate, proposes the employee it belongs to and
phrases a message for the operator, who always confirms the assignment.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace

from coi_intake.extraction.certificate_parser import CertificateParser
from coi_intake.extraction.models import ParsedCertificate
from coi_intake.matching.employee_matcher import EmployeeMatcher
from coi_intake.matching.models import EmployeeRecord, MatchResult
from coi_intake.matching.name_tables import load_name_tables
from coi_intake.utils.config import AppConfig
from coi_intake.utils.logger import get_logger

logger = get_logger(__name__)

RESPONSE_EXCERPT_LENGTH = 300

UNEXTRACTABLE_MESSAGE = (
    "Image files cannot be scanned for text. Upload a PDF version of the COI, "
    "or enter the details manually."
)
NO_NAME_MESSAGE = (
    "Could not extract insured name from document. "
    "Please select employee or enter name manually."
)


@dataclass
class IntakeResult:
    """Parsed certificate and proposed employee, pending confirmation."""

    parsed: ParsedCertificate
    match: MatchResult
    message: str
    requires_confirmation: bool = True


def build_message(parsed: ParsedCertificate, match: MatchResult, high_confidence: int = 80) -> str:
    """Phrase the operator message for an intake result."""
    if not parsed.text_extractable:
        return UNEXTRACTABLE_MESSAGE
    employee = match.matched_employee
    if employee is not None and match.confidence >= high_confidence:
        return (
            f"Matched to {employee.first_name} {employee.last_name} "
            f"({match.confidence}% confidence)"
        )
    display_name = parsed.raw_insured_name or parsed.insured_name
    if display_name:
        return f'Found "{display_name}" - please select employee or enter as external name.'
    return NO_NAME_MESSAGE


class IntakeService:
    """Runs parsing and employee matching for uploaded certificates.

    Args:
        config: Application configuration.
        log: Logger receiving trace output.
    """

    def __init__(self, config: AppConfig | None = None, log: logging.Logger | None = None) -> None:
        self.config = config or AppConfig()
        self.log = log or logger
        tables = load_name_tables(self.config.tables.name_tables_path)
        self.parser = CertificateParser(self.config.extraction, tables, self.log)
        self.matcher = EmployeeMatcher(self.config.matching, tables, self.log)

    def process(
        self,
        text: str,
        roster: Iterable[EmployeeRecord],
        email: str | None = None,
    ) -> IntakeResult:
        """Parse a certificate and propose its employee.

        Args:
            text: Extracted document text, or the no-text marker.
            roster: Employees to match against.
            email: Email address supplied with the upload, if any.

        Returns:
            The intake result. ``requires_confirmation`` is always ``True``.

        Raises:
            ExtractionFailure: If ``text`` shows that text extraction failed.
        """
        parsed = self.parser.parse(text)
        match = self.matcher.match_employee(parsed.insured_name, email, roster)
        message = build_message(parsed, match, self.config.matching.high_confidence)

        self.log.info(
            "Intake: insured=%s matched=%s confidence=%d",
            parsed.raw_insured_name or parsed.insured_name,
            match.employee_id,
            match.confidence,
        )
        return IntakeResult(
            parsed=replace(parsed, raw_text_excerpt=parsed.raw_text_excerpt[:RESPONSE_EXCERPT_LENGTH]),
            match=match,
            message=message,
        )

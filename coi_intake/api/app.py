"""FastAPI application for the COI intake API.

Provides REST endpoints for certificate parsing, employee matching,
the combined intake workflow, document routing, expiration checks and
health checks. Rosters travel with each request and are never stored.
"""

from dataclasses import asdict
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from coi_intake import __version__
from coi_intake.errors import ExtractionFailure
from coi_intake.expiry import assess_expiration
from coi_intake.extraction.certificate_parser import CertificateParser
from coi_intake.extraction.contract_parser import parse_document
from coi_intake.extraction.document_classifier import DocumentClassifier, DocumentKind
from coi_intake.extraction.models import ParsedCertificate
from coi_intake.intake import IntakeService
from coi_intake.matching.employee_matcher import EmployeeMatcher
from coi_intake.matching.name_tables import load_name_tables
from coi_intake.utils.config import AppConfig, load_config
from coi_intake.utils.logger import get_logger

from .schemas import (
    ClassifyRequest,
    ClassifyResponse,
    DocumentParseResponse,
    ExpirationRequest,
    ExpirationResponse,
    HealthResponse,
    IntakeRequest,
    IntakeResponse,
    MatchRequest,
    MatchResultResponse,
    ParsedCertificateResponse,
    ParsedContractResponse,
    ParseRequest,
)

logger = get_logger(__name__)

app = FastAPI(
    title="COI Intake API",
    description="Extract certificate of insurance fields and match insured parties to employees",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> AppConfig:
    return load_config()


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    tables = load_name_tables(_get_config().tables.name_tables_path)
    return HealthResponse(
        status="healthy",
        version=__version__,
        name_tables_version=tables.version,
    )


@app.post("/parse", response_model=ParsedCertificateResponse)
async def parse_certificate(request: ParseRequest) -> ParsedCertificateResponse:
    """Extract structured fields from certificate text."""
    config = _get_config()
    try:
        parser = CertificateParser(
            config.extraction, load_name_tables(config.tables.name_tables_path)
        )
        parsed = parser.parse(request.text)
    except ExtractionFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Parsing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ParsedCertificateResponse(**asdict(parsed))


@app.post("/match", response_model=MatchResultResponse)
async def match_employee(request: MatchRequest) -> MatchResultResponse:
    """Match an insured name and/or email against the supplied roster."""
    config = _get_config()
    try:
        matcher = EmployeeMatcher(
            config.matching, load_name_tables(config.tables.name_tables_path)
        )
        result = matcher.match_employee(
            request.name,
            request.email,
            [employee.to_record() for employee in request.roster],
            min_confidence=request.min_confidence,
            require_exact=request.require_exact,
        )
    except Exception as exc:
        logger.error("Matching failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return MatchResultResponse(**asdict(result))


@app.post("/intake", response_model=IntakeResponse)
async def intake_certificate(request: IntakeRequest) -> IntakeResponse:
    """Parse a certificate and propose the employee it belongs to."""
    try:
        service = IntakeService(_get_config())
        result = service.process(
            request.text,
            [employee.to_record() for employee in request.roster],
            request.email,
        )
    except ExtractionFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Intake failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return IntakeResponse(
        parsed=ParsedCertificateResponse(**asdict(result.parsed)),
        match=MatchResultResponse(**asdict(result.match)),
        requires_confirmation=result.requires_confirmation,
        message=result.message,
    )


@app.post("/classify", response_model=ClassifyResponse)
async def classify_document(request: ClassifyRequest) -> ClassifyResponse:
    """Decide whether a document is a certificate or a contract."""
    classifier = DocumentClassifier(Path(_get_config().classification.templates_path))
    match = classifier.classify(request.text)
    return ClassifyResponse(kind=match.kind, scores=match.scores)


@app.post("/expiration", response_model=ExpirationResponse)
async def expiration_status(request: ExpirationRequest) -> ExpirationResponse:
    """Report how close a certificate is to expiring."""
    try:
        assessment = assess_expiration(request.expiration_date, request.today)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ExpirationResponse(**asdict(assessment))


@app.post("/parse-document", response_model=DocumentParseResponse)
async def parse_any_document(request: ParseRequest) -> DocumentParseResponse:
    """Route a document to the certificate or contract parser and parse it."""
    config = _get_config()
    try:
        parsed = parse_document(
            request.text,
            config.extraction,
            load_name_tables(config.tables.name_tables_path),
            DocumentClassifier(Path(config.classification.templates_path)),
        )
    except ExtractionFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Document parsing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if isinstance(parsed, ParsedCertificate):
        return DocumentParseResponse(
            kind=DocumentKind.COI,
            certificate=ParsedCertificateResponse(**asdict(parsed)),
        )
    return DocumentParseResponse(
        kind=DocumentKind.CONTRACT,
        contract=ParsedContractResponse(**asdict(parsed)),
    )

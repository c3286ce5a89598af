"""Pydantic request/response schemas for the FastAPI endpoints."""

from datetime import date

from pydantic import BaseModel, Field

from coi_intake.expiry import AlertFrequency, ExpirationStatus, Urgency
from coi_intake.extraction.document_classifier import DocumentKind
from coi_intake.extraction.models import CoverageKind, DocumentType
from coi_intake.matching.models import EmployeeRecord, MatchType


class EmployeeIn(BaseModel):
    """A roster entry sent with a request."""

    id: str
    first_name: str
    last_name: str
    email: str = ""
    active: bool = True

    def to_record(self) -> EmployeeRecord:
        return EmployeeRecord(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            active=self.active,
        )


class ParseRequest(BaseModel):
    text: str


class MatchRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    roster: list[EmployeeIn] = Field(default_factory=list)
    min_confidence: int | None = Field(default=None, ge=0, le=100)
    require_exact: bool = False


class IntakeRequest(BaseModel):
    text: str
    email: str | None = None
    roster: list[EmployeeIn] = Field(default_factory=list)


class ClassifyRequest(BaseModel):
    text: str


class ExpirationRequest(BaseModel):
    expiration_date: str
    today: date | None = None


class ParsedCertificateResponse(BaseModel):
    """Response schema for a parsed certificate."""

    insured_name: str | None
    raw_insured_name: str | None
    policy_number: str | None
    effective_date: str | None
    expiration_date: str | None
    insurer_name: str | None
    coverage_amounts: dict[CoverageKind, float]
    document_type: DocumentType
    confidence: int
    raw_text_excerpt: str
    text_extractable: bool


class EmployeeSummaryResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str


class SuggestedEmployeeResponse(EmployeeSummaryResponse):
    score: int


class MatchResultResponse(BaseModel):
    """Response schema for an employee match."""

    employee_id: str | None
    confidence: int
    match_type: MatchType
    matched_employee: EmployeeSummaryResponse | None
    suggested_employees: list[SuggestedEmployeeResponse]


class IntakeResponse(BaseModel):
    """Response schema for certificate intake; always needs confirmation."""

    success: bool = True
    parsed: ParsedCertificateResponse
    match: MatchResultResponse
    requires_confirmation: bool
    message: str


class ClassifyResponse(BaseModel):
    kind: DocumentKind
    scores: dict[str, int]


class ParsedContractResponse(BaseModel):
    """Response schema for a parsed contract."""

    party_names: list[str]
    effective_date: str | None
    signature_date: str | None
    contract_type: str | None
    key_terms: list[str]
    raw_text_excerpt: str
    confidence: int


class DocumentParseResponse(BaseModel):
    """A routed document; exactly one of the two results is set."""

    kind: DocumentKind
    certificate: ParsedCertificateResponse | None = None
    contract: ParsedContractResponse | None = None


class ExpirationResponse(BaseModel):
    days_until_expiration: int
    status: ExpirationStatus
    alert_frequency: AlertFrequency | None
    urgency: Urgency | None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    name_tables_version: int

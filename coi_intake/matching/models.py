"""Roster and match result types."""

from dataclasses import dataclass, field
from enum import StrEnum


class MatchType(StrEnum):
    """How an employee was matched."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    EMAIL = "email"
    PARTIAL = "partial"
    NONE = "none"


@dataclass(frozen=True)
class EmployeeRecord:
    """One roster entry supplied by the caller. Never modified."""

    id: str
    first_name: str
    last_name: str
    email: str = ""
    active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class EmployeeSummary:
    """Identity of a matched employee."""

    id: str
    first_name: str
    last_name: str
    email: str

    @classmethod
    def from_record(cls, record: EmployeeRecord) -> "EmployeeSummary":
        return cls(record.id, record.first_name, record.last_name, record.email)


@dataclass(frozen=True)
class SuggestedEmployee:
    """A candidate offered to the operator, with its score."""

    id: str
    first_name: str
    last_name: str
    email: str
    score: int

    @classmethod
    def from_record(cls, record: EmployeeRecord, score: int) -> "SuggestedEmployee":
        return cls(record.id, record.first_name, record.last_name, record.email, score)


@dataclass(frozen=True)
class ScoredCandidate:
    """Best score of one employee across all matching strategies."""

    employee: EmployeeRecord
    score: int
    match_type: MatchType


@dataclass
class MatchResult:
    """Outcome of resolving a name or email to a roster employee.

    ``matched_employee`` is only set when the best score clears the
    high-confidence threshold; the operator still confirms it.
    """

    employee_id: str | None = None
    confidence: int = 0
    match_type: MatchType = MatchType.NONE
    matched_employee: EmployeeSummary | None = None
    suggested_employees: list[SuggestedEmployee] = field(default_factory=list)

    @classmethod
    def none(cls) -> "MatchResult":
        """Build the empty result."""
        return cls()

    @property
    def matched(self) -> bool:
        return self.employee_id is not None

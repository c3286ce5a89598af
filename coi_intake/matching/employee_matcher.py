"""Resolve an insured name or email to an employee on a roster.

Every active employee is scored against the input with several
strategies (exact, nickname, edit-distance similarity, partial
containment) and keeps its best score. The best candidates are offered
as suggestions; the top one is only selected when it clears the
high-confidence threshold.
"""

import logging
from collections.abc import Iterable

from coi_intake.utils.config import MatchingConfig
from coi_intake.utils.logger import get_logger

from .models import (
    EmployeeRecord,
    EmployeeSummary,
    MatchResult,
    MatchType,
    ScoredCandidate,
    SuggestedEmployee,
)
from .name_tables import NameTables, load_name_tables
from .normalize import is_business_styled, normalize_name, similarity_score

logger = get_logger(__name__)

EXACT_SCORE = 100
NICKNAME_SCORE = 95
LAST_NAME_FLOOR = 70
FIRST_NAME_FLOOR = 50


def person_name_candidates(name: str, tables: NameTables | None = None) -> list[str]:
    """Derive plausible person names from an insured name.

    "John Smith Roofing LLC" yields ``["john smith"]``; a three word
    name also yields first plus third word, to skip a middle name.
    """
    words = normalize_name(name, tables).split()
    if not 2 <= len(words) <= 4:
        return []
    first = words[0]
    if not 2 <= len(first) <= 15 or any(ch.isdigit() for ch in first):
        return []
    candidates = [f"{words[0]} {words[1]}"]
    if len(words) >= 3:
        candidates.append(f"{words[0]} {words[2]}")
    return candidates


class EmployeeMatcher:
    """Scores names and emails against a roster snapshot.

    Args:
        config: Matching thresholds.
        tables: Name reference tables. Defaults to the packaged tables.
        log: Logger receiving trace output.
    """

    def __init__(
        self,
        config: MatchingConfig | None = None,
        tables: NameTables | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.config = config or MatchingConfig()
        self.tables = tables or load_name_tables()
        self.log = log or logger

    def score_employee(self, name: str, employee: EmployeeRecord) -> ScoredCandidate:
        """Score one employee against an insured name.

        Args:
            name: Insured name as extracted.
            employee: Roster entry.

        Returns:
            The employee's best score and how it was reached.
        """
        normalized = normalize_name(name, self.tables)
        full_name = normalize_name(f"{employee.first_name} {employee.last_name}", self.tables)
        reversed_name = normalize_name(f"{employee.last_name} {employee.first_name}", self.tables)
        business = is_business_styled(name, self.tables)

        if not business and normalized in (full_name, reversed_name):
            return ScoredCandidate(employee, EXACT_SCORE, MatchType.EXACT)

        score = 0
        if self._is_nickname_match(normalized, employee):
            score = NICKNAME_SCORE
            self.log.debug("Nickname match: %r ~ %r", name, employee.full_name)

        score = max(
            score,
            similarity_score(normalized, full_name),
            similarity_score(normalized, reversed_name),
        )
        for candidate in person_name_candidates(name, self.tables):
            score = max(
                score,
                similarity_score(candidate, full_name),
                similarity_score(candidate, reversed_name),
            )

        last = normalize_name(employee.last_name, self.tables)
        first = normalize_name(employee.first_name, self.tables)
        if last and last in normalized:
            score = max(score, LAST_NAME_FLOOR)
        if first and first in normalized:
            score = max(score, FIRST_NAME_FLOOR)

        fuzzy = score >= self.config.fuzzy_threshold
        match_type = MatchType.FUZZY if fuzzy else MatchType.PARTIAL
        return ScoredCandidate(employee, score, match_type)

    def _is_nickname_match(self, normalized: str, employee: EmployeeRecord) -> bool:
        words = normalized.split()
        last_words = employee.last_name.lower().split()
        if not last_words or len(words) <= len(last_words):
            return False
        input_last = " ".join(words[-len(last_words) :])
        return input_last == " ".join(last_words) and self.tables.are_equivalent(
            words[0], employee.first_name
        )

    def rank(self, name: str, roster: Iterable[EmployeeRecord]) -> list[ScoredCandidate]:
        """Score every active employee and keep those above the candidate floor.

        Returns:
            Candidates by descending score; ties keep roster order.
        """
        scored = [
            self.score_employee(name, employee)
            for employee in roster
            if employee.active
        ]
        kept = [c for c in scored if c.score >= self.config.candidate_floor]
        return sorted(kept, key=lambda c: c.score, reverse=True)

    def match_by_name(
        self,
        name: str | None,
        roster: Iterable[EmployeeRecord],
        min_confidence: int | None = None,
        require_exact: bool = False,
    ) -> MatchResult:
        """Match an insured name against the roster.

        Args:
            name: Insured name; ``None`` or very short names match nothing.
            roster: Employees to consider. Inactive ones are ignored.
            min_confidence: Minimum score for a suggestion. Defaults to
                the configured value.
            require_exact: Only accept an exact top match.

        Returns:
            The match result. Never raises for unmatched names.
        """
        if min_confidence is None:
            min_confidence = self.config.min_confidence

        if not name or len(name.strip()) < self.config.min_name_length:
            self.log.debug("No name provided or name too short: %r", name)
            return MatchResult.none()

        ranked = self.rank(name, roster)
        result = MatchResult(
            suggested_employees=[
                SuggestedEmployee.from_record(c.employee, c.score)
                for c in ranked
                if c.score >= min_confidence
            ][: self.config.max_suggestions]
        )

        if not ranked or ranked[0].score < self.config.high_confidence:
            self.log.info(
                "No high-confidence match for %r (best score %d)",
                name,
                ranked[0].score if ranked else 0,
            )
            return result

        best = ranked[0]
        if require_exact and best.match_type != MatchType.EXACT:
            self.log.info("Exact match required but best match for %r is %s", name, best.match_type)
            return result

        result.employee_id = best.employee.id
        result.confidence = best.score
        result.match_type = best.match_type
        result.matched_employee = EmployeeSummary.from_record(best.employee)

        suggestions = result.suggested_employees
        if not suggestions or suggestions[0].id != best.employee.id:
            suggestions.insert(0, SuggestedEmployee.from_record(best.employee, best.score))
            del suggestions[self.config.max_suggestions :]

        self.log.info(
            "Matched %r to %s (%d, %s)",
            name,
            best.employee.full_name,
            best.score,
            best.match_type,
        )
        return result

    def match_by_email(self, email: str | None, roster: Iterable[EmployeeRecord]) -> MatchResult:
        """Match an exact email address, ignoring case and surrounding spaces."""
        if not email or not email.strip():
            return MatchResult.none()

        wanted = email.strip().lower()
        for employee in roster:
            if employee.active and employee.email and employee.email.strip().lower() == wanted:
                self.log.info("Email match found: %s", employee.email)
                return MatchResult(
                    employee_id=employee.id,
                    confidence=EXACT_SCORE,
                    match_type=MatchType.EMAIL,
                    matched_employee=EmployeeSummary.from_record(employee),
                    suggested_employees=[SuggestedEmployee.from_record(employee, EXACT_SCORE)],
                )

        self.log.debug("No email match for %s", wanted)
        return MatchResult.none()

    def match_employee(
        self,
        name: str | None,
        email: str | None,
        roster: Iterable[EmployeeRecord],
        min_confidence: int | None = None,
        require_exact: bool = False,
    ) -> MatchResult:
        """Match by email first, then fall back to the name."""
        roster = list(roster)
        if email:
            by_email = self.match_by_email(email, roster)
            if by_email.matched:
                return by_email
        if name:
            return self.match_by_name(name, roster, min_confidence, require_exact)
        return MatchResult.none()

"""Tests for certificate expiration tracking."""

from datetime import date, timedelta

import pytest

from coi_intake.expiry import (
    AlertFrequency,
    ExpirationStatus,
    ExpirationSummary,
    Urgency,
    assess_expiration,
    days_until,
    summarize_expirations,
)

TODAY = date(2024, 1, 1)


def _in(days: int) -> date:
    return TODAY + timedelta(days=days)


class TestAssessExpiration:
    """Tests for assess_expiration."""

    @pytest.mark.parametrize(
        ("days", "status", "frequency", "urgency"),
        [
            (60, ExpirationStatus.ACTIVE, None, None),
            (30, ExpirationStatus.EXPIRING_SOON, AlertFrequency.MONTH_BEFORE, Urgency.LOW),
            (20, ExpirationStatus.EXPIRING_SOON, None, None),
            (14, ExpirationStatus.EXPIRING_SOON, AlertFrequency.TWO_WEEKS, Urgency.MEDIUM),
            (7, ExpirationStatus.EXPIRING_SOON, AlertFrequency.ONE_WEEK, Urgency.MEDIUM),
            (3, ExpirationStatus.EXPIRING_SOON, AlertFrequency.DAILY, Urgency.HIGH),
            (0, ExpirationStatus.EXPIRING_SOON, AlertFrequency.DAILY, Urgency.CRITICAL),
            (-2, ExpirationStatus.EXPIRED, AlertFrequency.DAILY, Urgency.CRITICAL),
        ],
    )
    def test_schedule(
        self,
        days: int,
        status: ExpirationStatus,
        frequency: AlertFrequency | None,
        urgency: Urgency | None,
    ) -> None:
        assessment = assess_expiration(_in(days), today=TODAY)
        assert assessment.days_until_expiration == days
        assert assessment.status == status
        assert assessment.alert_frequency == frequency
        assert assessment.urgency == urgency

    def test_accepts_certificate_date_text(self) -> None:
        assert assess_expiration("January 31, 2024", today=TODAY).days_until_expiration == 30
        assert days_until("01/31/2024", today=TODAY) == 30

    def test_unrecognized_date(self) -> None:
        with pytest.raises(ValueError, match="Unrecognized date"):
            assess_expiration("next spring", today=TODAY)


class TestSummarizeExpirations:
    def test_buckets(self) -> None:
        dates = [_in(d) for d in (-1, 0, 3, 7, 8, 30, 31)]
        assert summarize_expirations(dates, today=TODAY) == ExpirationSummary(
            expired=1,
            expiring_today=1,
            expiring_this_week=2,
            expiring_this_month=2,
            total=7,
        )

    def test_empty(self) -> None:
        assert summarize_expirations([], today=TODAY) == ExpirationSummary()

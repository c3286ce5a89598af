"""Expiration status of certificates.

Computes how close a certificate is to expiring and which reminder
cadence applies on a given day. Sending reminders is left to the
caller.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from coi_intake.extraction.dates import parse_date


class ExpirationStatus(StrEnum):
    ACTIVE = "ACTIVE"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


class AlertFrequency(StrEnum):
    MONTH_BEFORE = "MONTH_BEFORE"
    TWO_WEEKS = "TWO_WEEKS"
    ONE_WEEK = "ONE_WEEK"
    DAILY = "DAILY"


class Urgency(StrEnum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


EXPIRING_SOON_DAYS = 30
DAILY_ALERT_DAYS = 6
WEEK_DAYS = 7


@dataclass(frozen=True)
class ExpirationAssessment:
    """Status of one certificate on a given day.

    ``alert_frequency`` and ``urgency`` are ``None`` on days without a
    scheduled reminder.
    """

    days_until_expiration: int
    status: ExpirationStatus
    alert_frequency: AlertFrequency | None = None
    urgency: Urgency | None = None


@dataclass(frozen=True)
class ExpirationSummary:
    expired: int = 0
    expiring_today: int = 0
    expiring_this_week: int = 0
    expiring_this_month: int = 0
    total: int = 0


def _as_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Unrecognized date: {value!r}")
    return parsed


def days_until(expiration_date: date | str, today: date | None = None) -> int:
    """Whole days from ``today`` to the expiration date; negative once expired."""
    today = today or date.today()
    return (_as_date(expiration_date) - today).days


def _alert_frequency(days: int) -> AlertFrequency | None:
    if days == 30:
        return AlertFrequency.MONTH_BEFORE
    if days == 14:
        return AlertFrequency.TWO_WEEKS
    if days == 7:
        return AlertFrequency.ONE_WEEK
    if days <= DAILY_ALERT_DAYS:
        return AlertFrequency.DAILY
    return None


def _urgency(days: int) -> Urgency:
    if days <= 0:
        return Urgency.CRITICAL
    if days <= DAILY_ALERT_DAYS:
        return Urgency.HIGH
    if days in (7, 14):
        return Urgency.MEDIUM
    return Urgency.LOW


def assess_expiration(
    expiration_date: date | str, today: date | None = None
) -> ExpirationAssessment:
    """Assess a certificate's expiration on ``today``.

    Args:
        expiration_date: Expiration as a date or in a certificate date format.
        today: Reference day. Defaults to the current date.

    Returns:
        Days remaining, status and the reminder due that day, if any.

    Raises:
        ValueError: If ``expiration_date`` is not a recognized date.
    """
    days = days_until(expiration_date, today)

    if days < 0:
        status = ExpirationStatus.EXPIRED
    elif days <= EXPIRING_SOON_DAYS:
        status = ExpirationStatus.EXPIRING_SOON
    else:
        status = ExpirationStatus.ACTIVE

    frequency = _alert_frequency(days)
    return ExpirationAssessment(
        days_until_expiration=days,
        status=status,
        alert_frequency=frequency,
        urgency=_urgency(days) if frequency is not None else None,
    )


def summarize_expirations(
    dates: Iterable[date | str], today: date | None = None
) -> ExpirationSummary:
    """Count certificates by how soon they expire.

    "This week" covers 1 to 7 days ahead and "this month" 8 to 30.
    """
    expired = expiring_today = this_week = this_month = total = 0
    for value in dates:
        total += 1
        days = days_until(value, today)
        if days < 0:
            expired += 1
        elif days == 0:
            expiring_today += 1
        elif days <= WEEK_DAYS:
            this_week += 1
        elif days <= EXPIRING_SOON_DAYS:
            this_month += 1
    return ExpirationSummary(
        expired=expired,
        expiring_today=expiring_today,
        expiring_this_week=this_week,
        expiring_this_month=this_month,
        total=total,
    )

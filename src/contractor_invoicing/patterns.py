"""Contractor work patterns and missing-day detection.

A ``WorkPattern`` is a plain value owned by the caller. Learning a pattern
returns a new value; nothing is cached between calls.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from contractor_invoicing.invoicing import DailyWorkRecord
from contractor_invoicing.periods import days_until_deadline
from contractor_invoicing.schedule import WorkPeriod

WEEKDAYS = frozenset({0, 1, 2, 3, 4})
MINIMUM_RECORDS = 5
URGENT_DEADLINE_DAYS = 2


class AlertSeverity(str, Enum):
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class WorkPattern:
    """How a contractor usually works."""

    contractor_id: str
    standard_work_days: frozenset[int] = WEEKDAYS
    average_days_per_entry: Decimal = Decimal("1")
    sample_size: int = 0

    @classmethod
    def default(cls, contractor_id: str) -> WorkPattern:
        return cls(contractor_id=contractor_id)

    def is_work_day(self, day: date) -> bool:
        return day.weekday() in self.standard_work_days


@dataclass(frozen=True)
class MissingDayAlert:
    date: date
    severity: AlertSeverity
    message: str


def learn_work_pattern(
    pattern: WorkPattern,
    records: Iterable[DailyWorkRecord],
    minimum_records: int = MINIMUM_RECORDS,
) -> WorkPattern:
    """Derive an updated pattern from worked records.

    Returns ``pattern`` unchanged when fewer than ``minimum_records`` records
    have any days worked.
    """
    worked = [record for record in records if record.days_worked > 0]
    if len(worked) < minimum_records:
        return pattern

    # Any weekday with a worked record becomes a standard work day.
    work_days = frozenset(record.date.weekday() for record in worked)

    total_days = sum((record.days_worked for record in worked), Decimal("0"))
    # Rounded to the nearest half day.
    average = (total_days / len(worked) * 2).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    ) / 2

    return WorkPattern(
        contractor_id=pattern.contractor_id,
        standard_work_days=work_days,
        average_days_per_entry=average,
        sample_size=len(worked),
    )


def find_missing_days(
    period: WorkPeriod,
    records: Iterable[DailyWorkRecord],
    pattern: WorkPattern,
    today: date,
) -> list[MissingDayAlert]:
    """List past standard work days in ``period`` that have no record."""
    recorded = {record.date for record in records}
    severity = (
        AlertSeverity.HIGH
        if days_until_deadline(period, today) <= URGENT_DEADLINE_DAYS
        else AlertSeverity.MEDIUM
    )

    last_day = min(period.end_date, today - timedelta(days=1))
    alerts: list[MissingDayAlert] = []
    day = period.start_date
    while day <= last_day:
        if pattern.is_work_day(day) and day not in recorded:
            alerts.append(
                MissingDayAlert(
                    date=day,
                    severity=severity,
                    message=f"Missing time entry for {day.strftime('%B %d, %Y')}",
                )
            )
        day += timedelta(days=1)
    return alerts

"""Read-only queries over a materialized payroll schedule."""

from collections.abc import Iterable
from datetime import date, timedelta

from contractor_invoicing.errors import InvalidArgumentError, PeriodNotFoundError
from contractor_invoicing.schedule import WorkPeriod

_WEEKEND = {5, 6}


def current_period(schedule: Iterable[WorkPeriod], today: date) -> WorkPeriod | None:
    """Return the period containing ``today``, or None outside the schedule."""
    for period in schedule:
        if period.start_date <= today <= period.end_date:
            return period
    return None


def upcoming_deadlines(
    schedule: Iterable[WorkPeriod], today: date, horizon_days: int = 30
) -> list[WorkPeriod]:
    """Return periods whose submission deadline is within the next ``horizon_days``.

    Both ends of the window are inclusive.
    """
    if horizon_days < 0:
        raise InvalidArgumentError(
            "horizon_days must not be negative", details={"horizon_days": horizon_days}
        )
    horizon_end = today + timedelta(days=horizon_days)
    return [
        period
        for period in schedule
        if today <= period.submission_deadline <= horizon_end
    ]


def period_by_number(schedule: Iterable[WorkPeriod], period_number: int) -> WorkPeriod:
    """Look up a period by its 1-based number.

    Raises:
        PeriodNotFoundError: If the schedule has no such period.
    """
    for period in schedule:
        if period.period_number == period_number:
            return period
    raise PeriodNotFoundError(
        f"Period {period_number} not found in payroll schedule",
        details={"period_number": period_number},
    )


def next_period(schedule: Iterable[WorkPeriod], today: date) -> WorkPeriod | None:
    """Return the first period that starts after ``today``."""
    for period in schedule:
        if period.start_date > today:
            return period
    return None


def count_weekdays(start: date, end: date) -> int:
    """Count the Monday-Friday days between two dates, inclusive."""
    count = 0
    day = start
    while day <= end:
        if day.weekday() not in _WEEKEND:
            count += 1
        day += timedelta(days=1)
    return count


def work_days_in_period(period: WorkPeriod) -> int:
    """Count the Monday-Friday days in a period."""
    return count_weekdays(period.start_date, period.end_date)


def days_until_deadline(period: WorkPeriod, today: date) -> int:
    # Negative once the deadline has passed.
    return (period.submission_deadline - today).days


def is_overdue(period: WorkPeriod, today: date) -> bool:
    return today > period.submission_deadline

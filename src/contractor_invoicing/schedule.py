"""Bi-weekly pay period scheduling.

Periods close on the cycle weekday (Thursday) and are paid on the following
Friday. A contract that starts mid-week gets a short first period that ends
on the next cycle weekday; every later period is exactly 14 days and starts
the day after the previous one ends.

All dates are naive calendar dates. Nothing in this module reads the clock
or any module state besides the packaged holiday calendar.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

import structlog

from contractor_invoicing.config.holidays import load_holiday_calendar
from contractor_invoicing.errors import InvalidArgumentError

logger = structlog.get_logger(__name__)

PERIOD_LENGTH_DAYS = 14
CYCLE_END_WEEKDAY = 3  # Thursday
PAYMENT_WEEKDAY = 4  # Friday
DEFAULT_PERIOD_COUNT = 26

_WEEKEND = {5, 6}


@dataclass(frozen=True)
class WorkPeriod:
    """One billing cycle of a contractor's schedule."""

    period_number: int
    start_date: date
    end_date: date
    submission_deadline: date
    payment_date: date
    is_partial: bool
    adjusted_payment_date: date | None = None

    @property
    def days_in_period(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def effective_payment_date(self) -> date:
        """Holiday-adjusted payment date when available, else the raw one."""
        return self.adjusted_payment_date or self.payment_date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class PayrollSchedule:
    """Materialized sequence of work periods for one contract."""

    contract_start: date
    first_period_end: date
    periods: tuple[WorkPeriod, ...]

    def __iter__(self) -> Iterator[WorkPeriod]:
        return iter(self.periods)

    def __len__(self) -> int:
        return len(self.periods)


@dataclass(frozen=True)
class ExplicitPeriod:
    """Period produced by the explicit first-period-end variant."""

    period_number: int
    start_date: date
    end_date: date
    total_days: int
    working_days: int
    is_partial: bool


@dataclass(frozen=True)
class ExplicitSchedule:
    """Schedule whose first period end was chosen by the caller."""

    contract_start: date
    first_period_end: date
    periods: tuple[ExplicitPeriod, ...]

    def __iter__(self) -> Iterator[ExplicitPeriod]:
        return iter(self.periods)

    def __len__(self) -> int:
        return len(self.periods)


def parse_date(value: date | datetime | str, field: str = "date") -> date:
    """Coerce a date, datetime or ISO ``YYYY-MM-DD`` string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidArgumentError(
                f"Invalid {field}: {value!r}", details={field: value}
            ) from exc
    raise InvalidArgumentError(
        f"Invalid {field}: expected a date, got {type(value).__name__}",
        details={field: value},
    )


def _validate_period_count(period_count: int) -> int:
    if isinstance(period_count, bool) or not isinstance(period_count, int):
        raise InvalidArgumentError(
            "period_count must be an integer", details={"period_count": period_count}
        )
    if period_count < 1:
        raise InvalidArgumentError(
            "period_count must be at least 1", details={"period_count": period_count}
        )
    return period_count


def next_period_end(start: date) -> date:
    """Return the end of the first period for a contract starting on ``start``.

    Monday-Thursday starts close on the next Thursday (a Thursday start rolls
    a full week). Friday-Sunday starts get 13 days plus the raw offset to the
    cycle weekday, so a weekend start never yields a short first period.
    """
    weekday = start.weekday()
    offset = (CYCLE_END_WEEKDAY - weekday) % 7
    if weekday in (4, 5, 6):
        return start + timedelta(days=13 + offset)
    return start + timedelta(days=offset or 7)


def next_friday(day: date) -> date:
    """Return the first Friday strictly after ``day``."""
    offset = (PAYMENT_WEEKDAY - day.weekday()) % 7 or 7
    return day + timedelta(days=offset)


def _build_period(
    period_number: int, start: date, end: date, check_partial: bool
) -> WorkPeriod:
    days = (end - start).days + 1
    return WorkPeriod(
        period_number=period_number,
        start_date=start,
        end_date=end,
        submission_deadline=end + timedelta(days=1),
        payment_date=next_friday(end),
        is_partial=check_partial and days < PERIOD_LENGTH_DAYS,
    )


def build_schedule(
    contract_start: date | datetime | str,
    period_count: int = DEFAULT_PERIOD_COUNT,
) -> PayrollSchedule:
    """Build ``period_count`` consecutive work periods from the contract start.

    Raises:
        InvalidArgumentError: If the start date cannot be parsed or
            ``period_count`` is below 1.
    """
    start = parse_date(contract_start, "contract_start")
    _validate_period_count(period_count)

    first_end = next_period_end(start)
    periods = [_build_period(1, start, first_end, check_partial=True)]

    period_start = first_end + timedelta(days=1)
    for number in range(2, period_count + 1):
        period_end = period_start + timedelta(days=PERIOD_LENGTH_DAYS - 1)
        periods.append(_build_period(number, period_start, period_end, check_partial=False))
        period_start = period_end + timedelta(days=1)

    logger.debug(
        "schedule_built",
        contract_start=start.isoformat(),
        first_period_end=first_end.isoformat(),
        periods=len(periods),
        partial_first=periods[0].is_partial,
    )
    return PayrollSchedule(
        contract_start=start, first_period_end=first_end, periods=tuple(periods)
    )


def estimate_working_days(total_days: int) -> int:
    """Rough weekday estimate: five of every seven days, rounded up."""
    return math.ceil(total_days * 5 / 7)


def build_schedule_from_first_period_end(
    contract_start: date | datetime | str,
    first_period_end: date | datetime | str,
    period_count: int = DEFAULT_PERIOD_COUNT,
) -> ExplicitSchedule:
    """Build a schedule whose first period ends on a caller-chosen date.

    Unlike :func:`build_schedule` the first period end is not derived from
    the cycle weekday, and working days are estimated rather than counted.
    The first period is always flagged partial, whatever its length.
    """
    start = parse_date(contract_start, "contract_start")
    first_end = parse_date(first_period_end, "first_period_end")
    _validate_period_count(period_count)
    if first_end < start:
        raise InvalidArgumentError(
            "first_period_end must not precede contract_start",
            details={
                "contract_start": start.isoformat(),
                "first_period_end": first_end.isoformat(),
            },
        )

    periods: list[ExplicitPeriod] = []
    period_start = start
    period_end = first_end
    for number in range(1, period_count + 1):
        if number > 1:
            period_start = period_end + timedelta(days=1)
            period_end = period_start + timedelta(days=PERIOD_LENGTH_DAYS - 1)
        total_days = (period_end - period_start).days + 1
        periods.append(
            ExplicitPeriod(
                period_number=number,
                start_date=period_start,
                end_date=period_end,
                total_days=total_days,
                working_days=estimate_working_days(total_days),
                is_partial=number == 1,
            )
        )

    return ExplicitSchedule(
        contract_start=start, first_period_end=first_end, periods=tuple(periods)
    )


def is_statutory_holiday(day: date) -> bool:
    """Return True if ``day`` is one of the fixed-date statutory holidays."""
    return any(holiday.matches(day) for holiday in load_holiday_calendar())


def _skip_weekend(day: date) -> date:
    while day.weekday() in _WEEKEND:
        day += timedelta(days=1)
    return day


def adjust_payment_date(day: date) -> date:
    """Push ``day`` forward past weekends and statutory holidays."""
    adjusted = _skip_weekend(day)
    while is_statutory_holiday(adjusted):
        adjusted = _skip_weekend(adjusted + timedelta(days=1))
    return adjusted


def adjust_schedule_payment_dates(schedule: PayrollSchedule) -> PayrollSchedule:
    """Return a copy of ``schedule`` with holiday-safe payment dates attached.

    The raw ``payment_date`` of every period is kept as-is; the adjusted
    value is stored alongside it in ``adjusted_payment_date``.
    """
    periods = tuple(
        replace(period, adjusted_payment_date=adjust_payment_date(period.payment_date))
        for period in schedule.periods
    )
    return replace(schedule, periods=periods)


def format_period(period: WorkPeriod) -> str:
    """Render a period as a short multi-line summary."""
    partial = " (Partial Period)" if period.is_partial else ""
    payment = period.payment_date.isoformat()
    if period.adjusted_payment_date and period.adjusted_payment_date != period.payment_date:
        payment = f"{period.adjusted_payment_date.isoformat()} (moved from {payment})"
    return (
        f"Period {period.period_number}: {period.start_date.isoformat()} - "
        f"{period.end_date.isoformat()} ({period.days_in_period} days)\n"
        f"    Submit by: {period.submission_deadline.isoformat()}\n"
        f"    Payment: {payment}{partial}"
    )

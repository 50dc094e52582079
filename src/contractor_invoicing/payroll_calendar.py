"""Company payroll calendar and invoice-generation timing.

Unlike the per-contractor schedule, the company calendar is a fixed list of
pay periods with a cut-off date, a pay date and a Saturday on which period
invoices are generated. Contractors are reminded on the following Tuesday,
Thursday and Friday until the invoice is submitted.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from pathlib import Path

import structlog

from contractor_invoicing.config.payroll_calendar import (
    DEFAULT_PAYROLL_CALENDAR_PATH,
    CalendarPeriod,
    load_payroll_calendar,
)
from contractor_invoicing.errors import InvalidArgumentError, PeriodNotFoundError
from contractor_invoicing.periods import count_weekdays

logger = structlog.get_logger(__name__)

DEFAULT_CUT_OFF_HORIZON_DAYS = 7


class NotificationType(str, Enum):
    INVOICE_CREATED = "invoice_created"
    REMINDER_TUESDAY = "reminder_tuesday"
    URGENT_THURSDAY = "urgent_thursday"
    FINAL_FRIDAY = "final_friday"


# Days after invoice generation and local time of day for each notification.
NOTIFICATION_TIMING: dict[NotificationType, tuple[int, time]] = {
    NotificationType.INVOICE_CREATED: (0, time(8, 0)),
    NotificationType.REMINDER_TUESDAY: (3, time(9, 0)),
    NotificationType.URGENT_THURSDAY: (5, time(10, 0)),
    NotificationType.FINAL_FRIDAY: (6, time(8, 0)),
}


@dataclass(frozen=True)
class ScheduledNotification:
    kind: NotificationType
    scheduled_at: datetime
    period_id: str
    invoice_id: str = ""
    contractor_id: str = ""
    sent: bool = False


@dataclass(frozen=True)
class MonthSummary:
    month: int
    periods: int
    work_days: int


@dataclass(frozen=True)
class YearSummary:
    year: int
    total_periods: int
    total_work_days: int
    first_period: CalendarPeriod | None
    last_period: CalendarPeriod | None
    months: tuple[MonthSummary, ...]


class PayrollCalendar:
    """Queries over a company payroll calendar.

    Periods are kept ordered by work period start. Every query takes the
    reference date explicitly.
    """

    def __init__(self, periods: Iterable[CalendarPeriod], company: str = "") -> None:
        self._periods = tuple(sorted(periods, key=lambda period: period.work_period_start))
        self.company = company
        self._logger = logger.bind(component="payroll_calendar", company=company)

    @classmethod
    def load(cls, path: Path | None = None) -> PayrollCalendar:
        """Load a calendar from YAML, defaulting to the packaged calendar.

        Raises:
            InvalidArgumentError: If the file is missing or malformed.
        """
        source = path or DEFAULT_PAYROLL_CALENDAR_PATH
        try:
            config = load_payroll_calendar(source)
        except FileNotFoundError as e:
            raise InvalidArgumentError(
                f"Payroll calendar not found: {source}", details={"path": str(source)}
            ) from e
        except ValueError as e:
            raise InvalidArgumentError(
                f"Invalid payroll calendar {source.name}: {e}",
                details={"path": str(source)},
            ) from e
        calendar = cls(config.periods, company=config.company)
        calendar._logger.debug("payroll_calendar_loaded", path=str(source), periods=len(calendar))
        return calendar

    @property
    def periods(self) -> tuple[CalendarPeriod, ...]:
        return self._periods

    def __iter__(self) -> Iterator[CalendarPeriod]:
        return iter(self._periods)

    def __len__(self) -> int:
        return len(self._periods)

    def current_period(self, today: date) -> CalendarPeriod | None:
        for period in self._periods:
            if period.contains(today):
                return period
        return None

    def next_period(self, today: date) -> CalendarPeriod | None:
        for period in self._periods:
            if period.work_period_start > today:
                return period
        return None

    def period_by_id(self, period_id: str) -> CalendarPeriod:
        for period in self._periods:
            if period.period_id == period_id:
                return period
        raise PeriodNotFoundError(
            f"Period {period_id} not found in payroll calendar",
            details={"period_id": period_id},
        )

    def periods_for_month(self, year: int, month: int) -> list[CalendarPeriod]:
        """Periods paid in the given month."""
        return [
            period for period in self._periods if period.year == year and period.month == month
        ]

    def periods_for_invoice_generation(self, day: date) -> list[CalendarPeriod]:
        """Periods whose invoices are generated on ``day``."""
        return [period for period in self._periods if period.invoice_generation_date == day]

    def is_invoice_generation_day(self, day: date) -> bool:
        return any(period.invoice_generation_date == day for period in self._periods)

    def upcoming_cut_offs(
        self, today: date, horizon_days: int = DEFAULT_CUT_OFF_HORIZON_DAYS
    ) -> list[CalendarPeriod]:
        """Periods whose cut-off falls within the next ``horizon_days``, inclusive."""
        if horizon_days < 0:
            raise InvalidArgumentError(
                "horizon_days must not be negative", details={"horizon_days": horizon_days}
            )
        horizon_end = today + timedelta(days=horizon_days)
        return [
            period for period in self._periods if today <= period.cut_off_date <= horizon_end
        ]

    def work_days(self, period: CalendarPeriod) -> int:
        return count_weekdays(period.work_period_start, period.work_period_end)

    def notification_schedule(
        self,
        period: CalendarPeriod,
        *,
        invoice_id: str = "",
        contractor_id: str = "",
    ) -> list[ScheduledNotification]:
        """Reminders for one period, from invoice creation to the final notice."""
        generated_on = period.invoice_generation_date
        return [
            ScheduledNotification(
                kind=kind,
                scheduled_at=datetime.combine(generated_on + timedelta(days=offset), at),
                period_id=period.period_id,
                invoice_id=invoice_id,
                contractor_id=contractor_id,
            )
            for kind, (offset, at) in NOTIFICATION_TIMING.items()
        ]

    def year_summary(self, year: int) -> YearSummary:
        """Period and work-day totals for a year, with a per-month breakdown."""
        year_periods = [period for period in self._periods if period.year == year]
        months = tuple(
            MonthSummary(
                month=month,
                periods=len(in_month),
                work_days=sum(self.work_days(period) for period in in_month),
            )
            for month in range(1, 13)
            for in_month in [self.periods_for_month(year, month)]
        )
        return YearSummary(
            year=year,
            total_periods=len(year_periods),
            total_work_days=sum(self.work_days(period) for period in year_periods),
            first_period=year_periods[0] if year_periods else None,
            last_period=year_periods[-1] if year_periods else None,
            months=months,
        )


def format_calendar_period(period: CalendarPeriod) -> str:
    """Render a period's work dates as ``Jan 3 - Jan 16, 2025``."""
    start = period.work_period_start
    end = period.work_period_end
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"

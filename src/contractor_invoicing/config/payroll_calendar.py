"""Company payroll calendar loader."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

DEFAULT_PAYROLL_CALENDAR_PATH = Path(__file__).resolve().parent / "payroll_calendar.yaml"

INVOICE_GENERATION_WEEKDAY = 5  # Saturday


@dataclass(frozen=True)
class CalendarPeriod:
    """One company-defined pay period.

    The work period ends on the cut-off date. Year and month are those of
    the pay date.
    """

    period_id: str
    work_period_start: date
    cut_off_date: date
    pay_date: date
    invoice_generation_date: date

    @property
    def work_period_end(self) -> date:
        return self.cut_off_date

    @property
    def year(self) -> int:
        return self.pay_date.year

    @property
    def month(self) -> int:
        return self.pay_date.month

    def contains(self, day: date) -> bool:
        return self.work_period_start <= day <= self.cut_off_date


@dataclass(frozen=True)
class PayrollCalendarConfig:
    company: str
    periods: tuple[CalendarPeriod, ...]


def saturday_after(day: date) -> date:
    """Return the first Saturday strictly after ``day``."""
    offset = (INVOICE_GENERATION_WEEKDAY - day.weekday()) % 7 or 7
    return day + timedelta(days=offset)


def _parse_day(item: dict[str, Any], key: str) -> date:
    value = item.get(key)
    if value is None:
        raise ValueError(f"missing {key}")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError(f"{key} must be YYYY-MM-DD, got {value!r}") from exc
    raise ValueError(f"{key} must be a date")


def _parse_period(item: dict[str, Any]) -> CalendarPeriod:
    period_id = item.get("id")
    if not period_id:
        raise ValueError("missing id")

    work_start = _parse_day(item, "work_start")
    cut_off = _parse_day(item, "cut_off")
    pay_date = _parse_day(item, "pay_date")
    if work_start > cut_off:
        raise ValueError("work_start is after cut_off")
    if pay_date <= cut_off:
        raise ValueError("pay_date must fall after cut_off")

    if item.get("invoice_generation") is None:
        generation = saturday_after(cut_off)
    else:
        generation = _parse_day(item, "invoice_generation")

    return CalendarPeriod(
        period_id=str(period_id),
        work_period_start=work_start,
        cut_off_date=cut_off,
        pay_date=pay_date,
        invoice_generation_date=generation,
    )


def parse_payroll_calendar(data: Any) -> PayrollCalendarConfig:
    """Build a payroll calendar from parsed YAML data."""
    if data is None:
        return PayrollCalendarConfig(company="", periods=())
    if not isinstance(data, dict):
        raise ValueError("payroll calendar must be a mapping with 'periods'")

    items = data.get("periods") or []
    if not isinstance(items, list):
        raise ValueError("periods must be a list")

    periods: list[CalendarPeriod] = []
    seen: set[str] = set()
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"periods[{idx}] must be a mapping")
        try:
            period = _parse_period(item)
        except ValueError as exc:
            raise ValueError(f"periods[{idx}] {exc}") from exc
        if period.period_id in seen:
            raise ValueError(f"periods[{idx}] duplicate id {period.period_id!r}")
        seen.add(period.period_id)
        periods.append(period)

    periods.sort(key=lambda period: period.work_period_start)
    return PayrollCalendarConfig(company=str(data.get("company") or ""), periods=tuple(periods))


@lru_cache
def load_payroll_calendar(path: Path = DEFAULT_PAYROLL_CALENDAR_PATH) -> PayrollCalendarConfig:
    """Load a payroll calendar from YAML."""
    raw = path.read_text(encoding="utf-8")
    return parse_payroll_calendar(yaml.safe_load(raw))

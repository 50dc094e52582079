"""Tests for the company payroll calendar."""

from datetime import date, datetime

import pytest

from contractor_invoicing.config.payroll_calendar import (
    load_payroll_calendar,
    parse_payroll_calendar,
    saturday_after,
)
from contractor_invoicing.errors import InvalidArgumentError, PeriodNotFoundError
from contractor_invoicing.payroll_calendar import (
    NotificationType,
    PayrollCalendar,
    format_calendar_period,
)


@pytest.fixture
def calendar():
    return PayrollCalendar.load()


def _period(**overrides):
    item = {
        "id": "p1",
        "work_start": "2025-01-03",
        "cut_off": "2025-01-16",
        "pay_date": "2025-01-17",
    }
    item.update(overrides)
    return item


class TestCalendarFile:
    def test_packaged_calendar(self):
        config = load_payroll_calendar()

        assert config.company == "Stack Production Testing"
        assert len(config.periods) == 26
        assert config.periods[0].period_id == "stack-2025-01-01"
        assert config.periods[-1].pay_date == date(2025, 12, 19)

    def test_generation_defaults_to_saturday_after_cut_off(self):
        config = parse_payroll_calendar({"periods": [_period()]})

        assert config.periods[0].invoice_generation_date == date(2025, 1, 18)

    def test_generation_override(self):
        config = parse_payroll_calendar(
            {"periods": [_period(invoice_generation="2025-01-20")]}
        )

        assert config.periods[0].invoice_generation_date == date(2025, 1, 20)

    def test_periods_are_sorted(self):
        later = _period(id="p2", work_start="2025-01-17", cut_off="2025-01-30", pay_date="2025-01-31")
        config = parse_payroll_calendar({"periods": [later, _period()]})

        assert [p.period_id for p in config.periods] == ["p1", "p2"]

    def test_empty_document(self):
        assert parse_payroll_calendar(None).periods == ()

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"id": None}, r"periods\[0\] missing id"),
            ({"cut_off": None}, r"periods\[0\] missing cut_off"),
            ({"pay_date": "Jan 17"}, "pay_date must be YYYY-MM-DD"),
            ({"work_start": "2025-01-20"}, "work_start is after cut_off"),
            ({"pay_date": "2025-01-16"}, "pay_date must fall after cut_off"),
        ],
    )
    def test_invalid_period(self, overrides, message):
        with pytest.raises(ValueError, match=message):
            parse_payroll_calendar({"periods": [_period(**overrides)]})

    def test_duplicate_id(self):
        with pytest.raises(ValueError, match=r"periods\[1\] duplicate id"):
            parse_payroll_calendar({"periods": [_period(), _period()]})

    def test_invalid_document_shape(self):
        with pytest.raises(ValueError):
            parse_payroll_calendar(["periods"])


@pytest.mark.parametrize(
    "day,expected",
    [
        (date(2025, 1, 16), date(2025, 1, 18)),
        (date(2025, 1, 17), date(2025, 1, 18)),
        (date(2025, 1, 18), date(2025, 1, 25)),
    ],
)
def test_saturday_after(day, expected):
    assert saturday_after(day) == expected


def test_current_and_next_period(calendar):
    assert calendar.current_period(date(2025, 1, 10)).period_id == "stack-2025-01-02"
    assert calendar.next_period(date(2025, 1, 10)).period_id == "stack-2025-01-03"
    assert calendar.current_period(date(2026, 3, 1)) is None
    assert calendar.next_period(date(2026, 3, 1)) is None


def test_period_by_id(calendar):
    assert calendar.period_by_id("stack-2025-08-03").cut_off_date == date(2025, 8, 28)

    with pytest.raises(PeriodNotFoundError, match="stack-2030-01-01"):
        calendar.period_by_id("stack-2030-01-01")


def test_periods_for_month_uses_pay_date(calendar):
    january = calendar.periods_for_month(2025, 1)

    assert [p.period_id for p in january] == [
        "stack-2025-01-01",
        "stack-2025-01-02",
        "stack-2025-01-03",
    ]
    assert len(calendar.periods_for_month(2025, 8)) == 3


def test_invoice_generation_day(calendar):
    assert [p.period_id for p in calendar.periods_for_invoice_generation(date(2025, 1, 4))] == [
        "stack-2025-01-01"
    ]
    assert calendar.is_invoice_generation_day(date(2025, 1, 18))
    assert not calendar.is_invoice_generation_day(date(2025, 1, 11))


def test_notification_schedule(calendar):
    period = calendar.period_by_id("stack-2025-01-02")

    notifications = calendar.notification_schedule(period, invoice_id="inv-1", contractor_id="c1")

    assert [(n.kind, n.scheduled_at) for n in notifications] == [
        (NotificationType.INVOICE_CREATED, datetime(2025, 1, 18, 8, 0)),
        (NotificationType.REMINDER_TUESDAY, datetime(2025, 1, 21, 9, 0)),
        (NotificationType.URGENT_THURSDAY, datetime(2025, 1, 23, 10, 0)),
        (NotificationType.FINAL_FRIDAY, datetime(2025, 1, 24, 8, 0)),
    ]
    assert all(n.invoice_id == "inv-1" and not n.sent for n in notifications)


def test_upcoming_cut_offs(calendar):
    assert [p.period_id for p in calendar.upcoming_cut_offs(date(2025, 1, 10), 7)] == [
        "stack-2025-01-02"
    ]
    assert calendar.upcoming_cut_offs(date(2025, 1, 10), 5) == []

    with pytest.raises(InvalidArgumentError):
        calendar.upcoming_cut_offs(date(2025, 1, 10), -1)


def test_work_days(calendar):
    assert calendar.work_days(calendar.period_by_id("stack-2025-01-01")) == 9
    assert calendar.work_days(calendar.period_by_id("stack-2025-01-02")) == 10


def test_year_summary(calendar):
    summary = calendar.year_summary(2025)

    assert summary.total_periods == 26
    assert summary.total_work_days == 259
    assert summary.first_period.period_id == "stack-2025-01-01"
    assert summary.last_period.period_id == "stack-2025-12-02"
    assert summary.months[0].periods == 3
    assert summary.months[0].work_days == 29
    assert summary.months[1].periods == 2


def test_year_summary_without_periods(calendar):
    summary = calendar.year_summary(2031)

    assert summary.total_periods == 0
    assert summary.first_period is None
    assert all(month.periods == 0 for month in summary.months)


def test_format_calendar_period(calendar):
    assert format_calendar_period(calendar.period_by_id("stack-2025-01-02")) == "Jan 3 - Jan 16, 2025"
    assert format_calendar_period(calendar.period_by_id("stack-2025-01-01")) == "Dec 23 - Jan 2, 2025"


def test_load_missing_file(tmp_path):
    with pytest.raises(InvalidArgumentError, match="not found"):
        PayrollCalendar.load(tmp_path / "missing.yaml")


def test_load_invalid_file(tmp_path):
    path = tmp_path / "calendar.yaml"
    path.write_text("periods:\n  - {id: p1, work_start: 2025-01-03}\n", encoding="utf-8")

    with pytest.raises(InvalidArgumentError, match="missing cut_off"):
        PayrollCalendar.load(path)

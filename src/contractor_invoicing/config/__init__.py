"""Configuration module for contractor invoicing."""

from contractor_invoicing.config.holidays import StatutoryHoliday, load_holiday_calendar
from contractor_invoicing.config.logging import configure_logging, get_logger, log_context
from contractor_invoicing.config.payroll_calendar import (
    CalendarPeriod,
    PayrollCalendarConfig,
    load_payroll_calendar,
)
from contractor_invoicing.config.settings import FlatSettings, get_settings

__all__ = [
    "CalendarPeriod",
    "FlatSettings",
    "PayrollCalendarConfig",
    "StatutoryHoliday",
    "configure_logging",
    "get_logger",
    "get_settings",
    "load_holiday_calendar",
    "load_payroll_calendar",
    "log_context",
]

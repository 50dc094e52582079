"""Contractor invoicing - bi-weekly pay period scheduling and invoice aggregation."""

__version__ = "0.1.0"

from contractor_invoicing.config import configure_logging, get_settings
from contractor_invoicing.errors import (
    DuplicateInvoiceError,
    InvalidArgumentError,
    InvoicingError,
    PeriodNotFoundError,
)
from contractor_invoicing.invoicing import (
    CompanyInfo,
    ContractorInfo,
    DailyWorkRecord,
    GeneratedInvoice,
    LineItem,
    LineItemCategory,
    PeriodSummary,
    RateCard,
    aggregate_invoice,
    invoice_number,
)
from contractor_invoicing.patterns import (
    MissingDayAlert,
    WorkPattern,
    find_missing_days,
    learn_work_pattern,
)
from contractor_invoicing.payroll_calendar import (
    NotificationType,
    PayrollCalendar,
    ScheduledNotification,
    YearSummary,
)
from contractor_invoicing.periods import (
    current_period,
    next_period,
    period_by_number,
    upcoming_deadlines,
    work_days_in_period,
)
from contractor_invoicing.rendering import render_invoice_html, render_invoice_text
from contractor_invoicing.schedule import (
    ExplicitPeriod,
    ExplicitSchedule,
    PayrollSchedule,
    WorkPeriod,
    adjust_payment_date,
    adjust_schedule_payment_dates,
    build_schedule,
    build_schedule_from_first_period_end,
    is_statutory_holiday,
)
from contractor_invoicing.service import (
    ContractorProfile,
    InMemoryInvoiceSink,
    InvoiceService,
    InvoiceSink,
)

__all__ = [
    # Version
    "__version__",
    # Scheduler
    "WorkPeriod",
    "PayrollSchedule",
    "ExplicitPeriod",
    "ExplicitSchedule",
    "build_schedule",
    "build_schedule_from_first_period_end",
    "adjust_payment_date",
    "adjust_schedule_payment_dates",
    "is_statutory_holiday",
    # Period queries
    "current_period",
    "upcoming_deadlines",
    "period_by_number",
    "next_period",
    "work_days_in_period",
    # Invoicing
    "DailyWorkRecord",
    "RateCard",
    "LineItem",
    "LineItemCategory",
    "PeriodSummary",
    "GeneratedInvoice",
    "ContractorInfo",
    "CompanyInfo",
    "aggregate_invoice",
    "invoice_number",
    "render_invoice_text",
    "render_invoice_html",
    # Company payroll calendar
    "PayrollCalendar",
    "NotificationType",
    "ScheduledNotification",
    "YearSummary",
    # Work patterns
    "WorkPattern",
    "MissingDayAlert",
    "learn_work_pattern",
    "find_missing_days",
    # Service
    "ContractorProfile",
    "InvoiceService",
    "InvoiceSink",
    "InMemoryInvoiceSink",
    # Errors
    "InvoicingError",
    "InvalidArgumentError",
    "PeriodNotFoundError",
    "DuplicateInvoiceError",
    # Config
    "get_settings",
    "configure_logging",
]

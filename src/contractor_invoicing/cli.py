"""Command line entry point for schedules, period invoices and the payroll calendar.

Usage:
    python -m contractor_invoicing schedule --start 2024-01-08 --periods 6
    python -m contractor_invoicing invoice --start 2024-01-08 --period 2 \\
        --records records.yaml --sequence INV-1001 --format html --output inv.html
    python -m contractor_invoicing calendar --today 2025-01-18 --year 2025
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from contractor_invoicing.config import configure_logging, get_logger, get_settings, log_context
from contractor_invoicing.errors import InvalidArgumentError, InvoicingError
from contractor_invoicing.invoicing import CompanyInfo, DailyWorkRecord, RateCard, to_decimal
from contractor_invoicing.payroll_calendar import PayrollCalendar, format_calendar_period
from contractor_invoicing.periods import current_period, upcoming_deadlines
from contractor_invoicing.rendering import render_invoice_html, render_invoice_text
from contractor_invoicing.schedule import (
    adjust_schedule_payment_dates,
    build_schedule,
    format_period,
    parse_date,
)
from contractor_invoicing.service import ContractorProfile, InvoiceService

logger = get_logger(__name__)


def load_records(path: Path) -> list[DailyWorkRecord]:
    """Load daily work records from a YAML file.

    The file is either a list of record mappings or a mapping with a
    ``records`` list.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return []
    if isinstance(data, dict):
        items = data.get("records") or []
    elif isinstance(data, list):
        items = data
    else:
        raise InvalidArgumentError(f"{path.name}: expected a list of records")

    if not isinstance(items, list):
        raise InvalidArgumentError(f"{path.name}: records must be a list")

    records: list[DailyWorkRecord] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidArgumentError(f"{path.name}: records[{idx}] must be a mapping")
        records.append(DailyWorkRecord.from_mapping(item))
    return records


def _today(args: argparse.Namespace) -> date:
    return parse_date(args.today, "today") if args.today else date.today()


def _print_schedule(args: argparse.Namespace) -> int:
    settings = get_settings()
    period_count = args.periods if args.periods is not None else settings.schedule_period_count
    schedule = build_schedule(args.start, period_count)
    if args.adjust_holidays:
        schedule = adjust_schedule_payment_dates(schedule)

    today = _today(args)
    active = current_period(schedule, today)

    for period in schedule:
        marker = "  <- current" if active and period.period_number == active.period_number else ""
        print(format_period(period) + marker)

    horizon = settings.deadline_horizon_days
    deadlines = upcoming_deadlines(schedule, today, horizon)
    print(f"\nDeadlines in the next {horizon} days:")
    if not deadlines:
        print("  none")
    for period in deadlines:
        print(
            f"  Period {period.period_number}: submit by "
            f"{period.submission_deadline.isoformat()}"
        )
    return 0


def _print_invoice(args: argparse.Namespace) -> int:
    rate_values: dict[str, Any] = {
        "day_rate": args.day_rate,
        "truck_rate": args.truck_rate,
        "rate_per_km": args.rate_per_km,
        "subsistence": args.subsistence_rate,
    }
    profile = ContractorProfile(
        contractor_id=args.contractor,
        name=args.name or args.contractor,
        contract_start=parse_date(args.start, "start"),
        rates=RateCard.from_mapping(
            {key: to_decimal(value, key) for key, value in rate_values.items() if value}
        ),
        invoice_sequence=args.sequence,
        email=args.email or "",
        bill_to=(
            CompanyInfo(name=args.bill_to, address=args.bill_to_address)
            if args.bill_to
            else None
        ),
    )
    service = InvoiceService()
    schedule = service.schedule_for(profile, args.periods)
    records = load_records(args.records)
    invoice = service.generate_for_period(
        profile, schedule, args.period, records, generated_at=datetime.now()
    )

    if args.format == "html":
        rendered = render_invoice_html(invoice)
    else:
        rendered = render_invoice_text(invoice)

    if args.output:
        args.output.write_text(rendered, encoding="utf-8")
        logger.info("invoice_written", path=str(args.output), invoice_number=invoice.invoice_number)
        print(f"Wrote {invoice.invoice_number} to {args.output}")
    else:
        print(rendered)
    return 0


def _print_calendar(args: argparse.Namespace) -> int:
    settings = get_settings()
    calendar = PayrollCalendar.load(args.calendar or settings.payroll_calendar_path)
    today = _today(args)

    print(f"{calendar.company or 'Company'} payroll calendar ({len(calendar)} periods)")

    active = calendar.current_period(today)
    if active is None:
        print("Current period: none")
    else:
        print(
            f"Current period: {active.period_id} {format_calendar_period(active)} "
            f"(cut-off {active.cut_off_date.isoformat()}, pay {active.pay_date.isoformat()})"
        )

    generating = calendar.periods_for_invoice_generation(today)
    if generating:
        print("Invoice generation today: " + ", ".join(p.period_id for p in generating))
        for period in generating:
            print(f"Notifications for {period.period_id}:")
            for notification in calendar.notification_schedule(period):
                print(
                    f"  {notification.kind.value:<18} "
                    f"{notification.scheduled_at:%Y-%m-%d %H:%M}"
                )

    horizon = settings.cut_off_horizon_days
    cut_offs = calendar.upcoming_cut_offs(today, horizon)
    print(f"\nCut-offs in the next {horizon} days:")
    if not cut_offs:
        print("  none")
    for period in cut_offs:
        print(f"  {period.period_id}: {period.cut_off_date.isoformat()}")

    if args.year:
        summary = calendar.year_summary(args.year)
        print(
            f"\nYear {summary.year}: {summary.total_periods} periods, "
            f"{summary.total_work_days} work days"
        )
        for month in summary.months:
            if month.periods:
                print(f"  {month.month:02d}: {month.periods} periods, {month.work_days} work days")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contractor-invoicing",
        description="Bi-weekly contractor pay periods and period invoices",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    schedule_parser = subparsers.add_parser("schedule", help="Print a pay period schedule")
    schedule_parser.add_argument("--start", required=True, help="Contract start (YYYY-MM-DD)")
    schedule_parser.add_argument("--periods", type=int, help="Number of periods to build")
    schedule_parser.add_argument(
        "--adjust-holidays",
        action="store_true",
        help="Move payment dates off weekends and statutory holidays",
    )
    schedule_parser.add_argument("--today", help="Reference date (defaults to today)")
    schedule_parser.set_defaults(handler=_print_schedule)

    invoice_parser = subparsers.add_parser("invoice", help="Aggregate a period invoice")
    invoice_parser.add_argument("--start", required=True, help="Contract start (YYYY-MM-DD)")
    invoice_parser.add_argument("--period", type=int, required=True, help="Period number")
    invoice_parser.add_argument("--periods", type=int, help="Number of periods to build")
    invoice_parser.add_argument(
        "--records", type=Path, required=True, help="YAML file of daily records"
    )
    invoice_parser.add_argument("--sequence", default="INV", help="Invoice sequence prefix")
    invoice_parser.add_argument("--contractor", default="cli", help="Contractor id")
    invoice_parser.add_argument("--name", help="Contractor name (defaults to the id)")
    invoice_parser.add_argument("--email", help="Contractor email")
    invoice_parser.add_argument("--bill-to", help="Company billed")
    invoice_parser.add_argument("--bill-to-address", help="Billed company address")
    invoice_parser.add_argument("--day-rate", type=str)
    invoice_parser.add_argument("--truck-rate", type=str)
    invoice_parser.add_argument("--rate-per-km", type=str)
    invoice_parser.add_argument("--subsistence-rate", type=str)
    invoice_parser.add_argument("--format", choices=["text", "html"], default="text")
    invoice_parser.add_argument("--output", type=Path, help="Write the invoice to a file")
    invoice_parser.set_defaults(handler=_print_invoice)

    calendar_parser = subparsers.add_parser(
        "calendar", help="Company payroll calendar and invoice-generation days"
    )
    calendar_parser.add_argument(
        "--calendar", type=Path, help="Payroll calendar YAML (overrides PAYROLL_CALENDAR_PATH)"
    )
    calendar_parser.add_argument("--today", help="Reference date (defaults to today)")
    calendar_parser.add_argument("--year", type=int, help="Print a year summary")
    calendar_parser.set_defaults(handler=_print_calendar)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)

    with log_context(command=args.command):
        try:
            return args.handler(args)
        except InvalidArgumentError as e:
            logger.error("invalid_argument", error=e.message)
            print(f"error: {e.message}", file=sys.stderr)
            return 2
        except InvoicingError as e:
            logger.error("command_failed", error=e.message)
            print(f"error: {e.message}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())

"""Invoice generation for contractors and the storage boundary behind it."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol

from contractor_invoicing.config import FlatSettings, get_logger, get_settings, log_context
from contractor_invoicing.errors import (
    DuplicateInvoiceError,
    InvalidArgumentError,
    InvoicingError,
)
from contractor_invoicing.invoicing import (
    CompanyInfo,
    ContractorInfo,
    DailyWorkRecord,
    GeneratedInvoice,
    RateCard,
    aggregate_invoice,
)
from contractor_invoicing.periods import current_period, period_by_number
from contractor_invoicing.schedule import PayrollSchedule, build_schedule, parse_date

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContractorProfile:
    """The contractor fields the invoicing core reads."""

    contractor_id: str
    name: str
    contract_start: date
    rates: RateCard
    invoice_sequence: str
    email: str = ""
    phone: str | None = None
    address: str | None = None
    bill_to: CompanyInfo | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ContractorProfile:
        """Build a profile from a stored contractor row."""
        contractor_id = data.get("id")
        if not contractor_id:
            raise InvalidArgumentError("contractor record is missing its id")
        start = data.get("start_date", data.get("contract_start_date"))
        if start is None:
            raise InvalidArgumentError(
                "contractor record is missing its start date",
                details={"id": contractor_id},
            )
        return cls(
            contractor_id=str(contractor_id),
            name=str(data.get("contractor_name") or data.get("name") or ""),
            contract_start=parse_date(start, "start_date"),
            rates=RateCard.from_mapping(data),
            invoice_sequence=str(data.get("sequence_number") or data.get("invoice_sequence") or ""),
            email=str(data.get("email") or ""),
            phone=data.get("phone") or None,
            address=data.get("address") or None,
            bill_to=(
                CompanyInfo(
                    name=str(data["company_name"]),
                    address=data.get("company_address") or None,
                )
                if data.get("company_name")
                else None
            ),
        )

    def contact_info(self) -> ContractorInfo:
        return ContractorInfo(
            name=self.name, email=self.email, phone=self.phone, address=self.address
        )


class InvoiceSink(Protocol):
    """Write-only destination for generated invoices."""

    def save(self, contractor_id: str, invoice: GeneratedInvoice) -> str:
        """Persist the invoice and return its storage id."""
        ...


class InMemoryInvoiceSink:
    """Invoice store allowing at most one invoice per contractor and period."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._invoices: dict[tuple[str, int], GeneratedInvoice] = {}
        self._logger = logger.bind(component="invoice_sink")

    def save(self, contractor_id: str, invoice: GeneratedInvoice) -> str:
        key = (contractor_id, invoice.period_number)
        with self._lock:
            if key in self._invoices:
                raise DuplicateInvoiceError(
                    f"Invoice for period {invoice.period_number} already exists",
                    details={
                        "contractor_id": contractor_id,
                        "period_number": invoice.period_number,
                        "invoice_number": self._invoices[key].invoice_number,
                    },
                )
            self._invoices[key] = invoice
        self._logger.info(
            "invoice_saved",
            contractor_id=contractor_id,
            invoice_number=invoice.invoice_number,
        )
        return f"{contractor_id}:{invoice.invoice_number}"

    def invoices_for(self, contractor_id: str) -> list[GeneratedInvoice]:
        with self._lock:
            invoices = [
                invoice
                for (owner, _), invoice in self._invoices.items()
                if owner == contractor_id
            ]
        return sorted(invoices, key=lambda invoice: invoice.period_number)

    def __len__(self) -> int:
        with self._lock:
            return len(self._invoices)


class InvoiceService:
    """Generates contractor invoices against a materialized schedule.

    The service:
    1. Builds schedules with the configured period count
    2. Resolves the requested period by number
    3. Aggregates the period's daily records with the configured tax rate
    4. Hands the result to the invoice sink when asked to persist
    """

    def __init__(
        self,
        settings: FlatSettings | None = None,
        sink: InvoiceSink | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._sink = sink or InMemoryInvoiceSink()
        self._logger = logger.bind(component="invoice_service")

    @property
    def sink(self) -> InvoiceSink:
        return self._sink

    def schedule_for(
        self, profile: ContractorProfile, period_count: int | None = None
    ) -> PayrollSchedule:
        """Build the contractor's schedule."""
        count = (
            period_count if period_count is not None else self._settings.schedule_period_count
        )
        schedule = build_schedule(profile.contract_start, count)
        self._logger.info(
            "schedule_built",
            contractor_id=profile.contractor_id,
            periods=len(schedule),
            first_period_end=schedule.first_period_end.isoformat(),
        )
        return schedule

    def generate_for_period(
        self,
        profile: ContractorProfile,
        schedule: PayrollSchedule,
        period_number: int,
        records: Iterable[DailyWorkRecord],
        *,
        generated_at: datetime | None = None,
    ) -> GeneratedInvoice:
        """Generate the invoice for one period of the contractor's schedule.

        Raises:
            PeriodNotFoundError: If ``period_number`` is not in the schedule.
        """
        with log_context(contractor_id=profile.contractor_id, period_number=period_number):
            period = period_by_number(schedule, period_number)
            invoice = aggregate_invoice(
                period,
                records,
                profile.rates,
                profile.invoice_sequence,
                tax_rate=self._settings.invoice_tax_rate,
                generated_at=generated_at,
                due_days=self._settings.invoice_due_days,
                contractor=profile.contact_info(),
                bill_to=profile.bill_to,
            )
            self._logger.info(
                "invoice_generated",
                invoice_number=invoice.invoice_number,
                line_items=len(invoice.line_items),
                total=str(invoice.total),
            )
        return invoice

    def generate_and_save(
        self,
        profile: ContractorProfile,
        schedule: PayrollSchedule,
        period_number: int,
        records: Iterable[DailyWorkRecord],
        *,
        generated_at: datetime | None = None,
    ) -> tuple[str, GeneratedInvoice]:
        """Generate the period invoice and persist it through the sink."""
        invoice = self.generate_for_period(
            profile, schedule, period_number, records, generated_at=generated_at
        )
        storage_id = self._sink.save(profile.contractor_id, invoice)
        return storage_id, invoice

    def generate_current(
        self,
        profile: ContractorProfile,
        schedule: PayrollSchedule,
        records: Iterable[DailyWorkRecord],
        today: date,
        *,
        generated_at: datetime | None = None,
    ) -> GeneratedInvoice:
        """Generate the invoice for the period that contains ``today``."""
        period = current_period(schedule, today)
        if period is None:
            raise InvalidArgumentError(
                "No current period found for contractor",
                details={
                    "contractor_id": profile.contractor_id,
                    "today": today.isoformat(),
                },
            )
        return self.generate_for_period(
            profile, schedule, period.period_number, records, generated_at=generated_at
        )

    def generate_bulk(
        self,
        profile: ContractorProfile,
        schedule: PayrollSchedule,
        period_numbers: Iterable[int],
        records: Iterable[DailyWorkRecord],
        *,
        generated_at: datetime | None = None,
    ) -> list[GeneratedInvoice]:
        """Generate invoices for several periods, skipping ones that fail."""
        all_records = list(records)
        results: list[GeneratedInvoice] = []
        for period_number in period_numbers:
            try:
                invoice = self.generate_for_period(
                    profile,
                    schedule,
                    period_number,
                    all_records,
                    generated_at=generated_at,
                )
            except InvoicingError as e:
                self._logger.warning(
                    "bulk_invoice_failed",
                    contractor_id=profile.contractor_id,
                    period_number=period_number,
                    error=str(e),
                )
                continue
            results.append(invoice)
        return results

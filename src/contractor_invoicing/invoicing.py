"""Invoice aggregation for a single work period.

Daily work records are rolled up into at most four line items (labor, truck,
travel, subsistence). GST is charged on the full subtotal, travel and
subsistence included. Money is kept as ``Decimal`` and rounded to cents with
ROUND_HALF_UP at the line-item, tax and average-rate level.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

import structlog

from contractor_invoicing.errors import InvalidArgumentError
from contractor_invoicing.schedule import WorkPeriod, parse_date

logger = structlog.get_logger(__name__)

GST_RATE = Decimal("0.05")
INVOICE_DUE_DAYS = 30
CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """Convert ints, floats and numeric strings to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Invalid {field_name}: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidArgumentError(
            f"Invalid {field_name}: {value!r}", details={field_name: value}
        ) from exc


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal) -> str:
    """Format an amount as dollars, e.g. ``$5,347.65``."""
    value = quantize_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _format_quantity(quantity: Decimal) -> str:
    return f"{quantity.normalize():f}"


def _plural(quantity: Decimal, word: str) -> str:
    return word if quantity == 1 else f"{word}s"


class LineItemCategory(str, Enum):
    """Kinds of charges an invoice can carry, in invoice order."""

    LABOR = "labor"
    TRUCK = "truck"
    TRAVEL = "travel"
    SUBSISTENCE = "subsistence"


@dataclass(frozen=True)
class DailyWorkRecord:
    """One contractor-day as submitted through daily check-in."""

    date: date
    days_worked: Decimal = ZERO
    truck_used: bool = False
    travel_distance_km: Decimal = ZERO
    subsistence_claimed: bool = False
    note: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "days_worked", to_decimal(self.days_worked, "days_worked"))
        object.__setattr__(
            self,
            "travel_distance_km",
            to_decimal(self.travel_distance_km, "travel_distance_km"),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DailyWorkRecord:
        """Build a record from a stored row.

        Accepts both the stored column names (``entry_date``, ``travel_kms``,
        ``notes``) and the attribute names.
        """
        raw_date = data.get("entry_date", data.get("date"))
        if raw_date is None:
            raise InvalidArgumentError("daily record is missing its date")
        return cls(
            date=parse_date(raw_date, "entry_date"),
            days_worked=to_decimal(data.get("days_worked"), "days_worked"),
            truck_used=bool(data.get("truck_used", False)),
            travel_distance_km=to_decimal(
                data.get("travel_kms", data.get("travel_distance_km")),
                "travel_kms",
            ),
            subsistence_claimed=bool(data.get("subsistence_claimed", False)),
            note=data.get("notes", data.get("note")),
        )


@dataclass(frozen=True)
class RateCard:
    """Per-contractor billing rates."""

    day_rate: Decimal
    truck_day_rate: Decimal
    rate_per_km: Decimal
    subsistence_rate: Decimal

    def __post_init__(self) -> None:
        for name in ("day_rate", "truck_day_rate", "rate_per_km", "subsistence_rate"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))

    @classmethod
    def default(cls) -> RateCard:
        return cls(
            day_rate=Decimal("450"),
            truck_day_rate=Decimal("150"),
            rate_per_km=Decimal("0.68"),
            subsistence_rate=Decimal("75"),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RateCard:
        """Build a rate card from a contractor row, defaulting blank rates."""
        fallback = cls.default()

        def pick(key: str, default: Decimal) -> Decimal:
            value = data.get(key)
            if value in (None, "", 0):
                return default
            return to_decimal(value, key)

        return cls(
            day_rate=pick("day_rate", fallback.day_rate),
            truck_day_rate=pick("truck_rate", fallback.truck_day_rate),
            rate_per_km=pick("rate_per_km", fallback.rate_per_km),
            subsistence_rate=pick("subsistence", fallback.subsistence_rate),
        )


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    category: LineItemCategory


@dataclass(frozen=True)
class PeriodSummary:
    total_days_worked: Decimal
    total_truck_days: int
    total_travel_km: Decimal
    total_subsistence_days: int
    average_daily_rate: Decimal


@dataclass(frozen=True)
class ContractorInfo:
    """Who the invoice is from."""

    name: str
    email: str = ""
    phone: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class CompanyInfo:
    """Who the invoice is billed to."""

    name: str
    address: str | None = None


@dataclass(frozen=True)
class GeneratedInvoice:
    """Invoice for one contractor period. Never mutated after creation."""

    invoice_number: str
    period: WorkPeriod
    line_items: tuple[LineItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    summary: PeriodSummary
    generated_at: datetime
    due_date: date
    work_days: tuple[DailyWorkRecord, ...] = field(default_factory=tuple)
    tax_rate: Decimal = GST_RATE
    contractor: ContractorInfo | None = None
    bill_to: CompanyInfo | None = None

    @property
    def period_number(self) -> int:
        return self.period.period_number

    @property
    def payment_date(self) -> date:
        return self.period.effective_payment_date

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready mapping for storage."""
        return {
            "invoice_number": self.invoice_number,
            "period_number": self.period.period_number,
            "period_start": self.period.start_date.isoformat(),
            "period_end": self.period.end_date.isoformat(),
            "is_partial_period": self.period.is_partial,
            "line_items": [
                {
                    "description": item.description,
                    "quantity": str(item.quantity),
                    "rate": str(item.rate),
                    "amount": str(item.amount),
                    "type": item.category.value,
                }
                for item in self.line_items
            ],
            "subtotal": str(self.subtotal),
            "gst": str(self.tax),
            "total": str(self.total),
            "period_summary": {
                "total_days_worked": str(self.summary.total_days_worked),
                "total_truck_days": self.summary.total_truck_days,
                "total_travel_kms": str(self.summary.total_travel_km),
                "total_subsistence_days": self.summary.total_subsistence_days,
                "average_daily_rate": str(self.summary.average_daily_rate),
            },
            "work_days": [
                {
                    "entry_date": record.date.isoformat(),
                    "days_worked": str(record.days_worked),
                    "truck_used": record.truck_used,
                    "travel_kms": str(record.travel_distance_km),
                    "subsistence_claimed": record.subsistence_claimed,
                    "notes": record.note,
                }
                for record in self.work_days
            ],
            "tax_rate": str(self.tax_rate),
            "contractor_info": asdict(self.contractor) if self.contractor else None,
            "company_info": asdict(self.bill_to) if self.bill_to else None,
            "generated_at": self.generated_at.isoformat(),
            "due_date": self.due_date.isoformat(),
            "payment_date": self.payment_date.isoformat(),
        }


def invoice_number(invoice_sequence: str, period_number: int, year: int) -> str:
    """Build ``{sequence}-{year}-P{nn}``."""
    if not invoice_sequence or not invoice_sequence.strip():
        raise InvalidArgumentError("invoice_sequence must not be empty")
    if period_number < 1:
        raise InvalidArgumentError(
            "period_number must be at least 1", details={"period_number": period_number}
        )
    return f"{invoice_sequence.strip()}-{year}-P{period_number:02d}"


def _line_item(
    category: LineItemCategory, description: str, quantity: Decimal, rate: Decimal
) -> LineItem:
    return LineItem(
        description=description,
        quantity=quantity,
        rate=rate,
        amount=quantize_money(quantity * rate),
        category=category,
    )


def build_line_items(
    total_days_worked: Decimal,
    total_truck_days: int,
    total_travel_km: Decimal,
    total_subsistence_days: int,
    rates: RateCard,
) -> list[LineItem]:
    """Emit one line item per non-zero total in fixed category order."""
    items: list[LineItem] = []

    if total_days_worked > 0:
        items.append(
            _line_item(
                LineItemCategory.LABOR,
                f"Labor - {_format_quantity(total_days_worked)} "
                f"{_plural(total_days_worked, 'day')} worked",
                total_days_worked,
                rates.day_rate,
            )
        )

    if total_truck_days > 0:
        truck_days = Decimal(total_truck_days)
        items.append(
            _line_item(
                LineItemCategory.TRUCK,
                f"Truck rental - {total_truck_days} {_plural(truck_days, 'day')}",
                truck_days,
                rates.truck_day_rate,
            )
        )

    if total_travel_km > 0:
        items.append(
            _line_item(
                LineItemCategory.TRAVEL,
                f"Travel - {_format_quantity(total_travel_km)} kilometers",
                total_travel_km,
                rates.rate_per_km,
            )
        )

    if total_subsistence_days > 0:
        subsistence_days = Decimal(total_subsistence_days)
        items.append(
            _line_item(
                LineItemCategory.SUBSISTENCE,
                f"Subsistence - {total_subsistence_days} "
                f"{_plural(subsistence_days, 'day')}",
                subsistence_days,
                rates.subsistence_rate,
            )
        )

    return items


def aggregate_invoice(
    period: WorkPeriod,
    records: Iterable[DailyWorkRecord],
    rates: RateCard,
    invoice_sequence: str,
    *,
    tax_rate: Decimal = GST_RATE,
    generated_at: datetime | None = None,
    due_days: int = INVOICE_DUE_DAYS,
    contractor: ContractorInfo | None = None,
    bill_to: CompanyInfo | None = None,
) -> GeneratedInvoice:
    """Aggregate a period's daily records into an invoice.

    Records outside the period are ignored. An empty record set produces a
    valid invoice with no line items and zero totals.

    Args:
        period: The period being invoiced.
        records: Daily work records; may include days outside the period.
        rates: The contractor's billing rates.
        invoice_sequence: Contractor invoice sequence prefix.
        tax_rate: Flat tax rate applied to the subtotal.
        generated_at: Generation timestamp. Defaults to now.
        due_days: Days from generation until the invoice is due.
        contractor: Contractor details printed on the invoice.
        bill_to: Company the invoice is billed to.

    Returns:
        The generated invoice.
    """
    tax_rate = to_decimal(tax_rate, "tax_rate")
    generated_at = generated_at or datetime.now()
    number = invoice_number(invoice_sequence, period.period_number, generated_at.year)

    in_period = sorted(
        (record for record in records if period.contains(record.date)),
        key=lambda record: record.date,
    )

    total_days_worked = sum((record.days_worked for record in in_period), ZERO)
    total_truck_days = sum(1 for record in in_period if record.truck_used)
    total_travel_km = sum((record.travel_distance_km for record in in_period), ZERO)
    total_subsistence_days = sum(1 for record in in_period if record.subsistence_claimed)

    line_items = build_line_items(
        total_days_worked,
        total_truck_days,
        total_travel_km,
        total_subsistence_days,
        rates,
    )

    subtotal = sum((item.amount for item in line_items), ZERO)
    tax = quantize_money(subtotal * tax_rate)
    total = subtotal + tax

    if total_days_worked > 0:
        average_daily_rate = quantize_money(subtotal / total_days_worked)
    else:
        average_daily_rate = ZERO

    invoice = GeneratedInvoice(
        invoice_number=number,
        period=period,
        line_items=tuple(line_items),
        subtotal=quantize_money(subtotal),
        tax=tax,
        total=quantize_money(total),
        summary=PeriodSummary(
            total_days_worked=total_days_worked,
            total_truck_days=total_truck_days,
            total_travel_km=total_travel_km,
            total_subsistence_days=total_subsistence_days,
            average_daily_rate=average_daily_rate,
        ),
        generated_at=generated_at,
        due_date=generated_at.date() + timedelta(days=due_days),
        work_days=tuple(in_period),
        tax_rate=tax_rate,
        contractor=contractor,
        bill_to=bill_to,
    )

    logger.debug(
        "invoice_aggregated",
        invoice_number=number,
        records=len(in_period),
        line_items=len(line_items),
        total=str(invoice.total),
    )
    return invoice

"""Plain-text and HTML renderings of a generated invoice."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from html import escape

from contractor_invoicing.invoicing import GeneratedInvoice, format_currency


def _long_date(day: date) -> str:
    return day.strftime("%B %d, %Y")


def tax_label(rate: Decimal) -> str:
    """``GST (5%)`` for a rate of 0.05."""
    percent = (rate * 100).normalize()
    return f"GST ({percent:f}%)"


def _period_line(invoice: GeneratedInvoice) -> str:
    period = invoice.period
    partial = " (Partial Period)" if period.is_partial else ""
    return (
        f"Period {period.period_number}: {period.start_date.isoformat()} - "
        f"{period.end_date.isoformat()}{partial}"
    )


def render_invoice_text(invoice: GeneratedInvoice) -> str:
    lines = [f"Invoice {invoice.invoice_number}"]
    if invoice.contractor:
        lines.append(f"From: {invoice.contractor.name}")
    if invoice.bill_to:
        lines.append(f"Bill to: {invoice.bill_to.name}")
    lines.extend(
        [
            _period_line(invoice),
            f"Due: {invoice.due_date.isoformat()}  Payment: {invoice.payment_date.isoformat()}",
            "",
        ]
    )
    for item in invoice.line_items:
        lines.append(
            f"  {item.description:<40} {format_currency(item.rate):>12} "
            f"{format_currency(item.amount):>12}"
        )
    lines.extend(
        [
            "",
            f"  {'Subtotal':<53} {format_currency(invoice.subtotal):>12}",
            f"  {tax_label(invoice.tax_rate):<53} {format_currency(invoice.tax):>12}",
            f"  {'Total':<53} {format_currency(invoice.total):>12}",
            "",
            f"Average daily rate: {format_currency(invoice.summary.average_daily_rate)}",
        ]
    )
    return "\n".join(lines)


def render_invoice_html(invoice: GeneratedInvoice) -> str:
    """Render a standalone HTML invoice document.

    Free-text fields (names, addresses, descriptions) are HTML-escaped.
    """
    period = invoice.period
    summary = invoice.summary

    items_html = ""
    for item in invoice.line_items:
        items_html += f"""
            <tr>
                <td>{escape(item.description)}</td>
                <td>{item.quantity.normalize():f}</td>
                <td>{format_currency(item.rate)}</td>
                <td class="amount">{format_currency(item.amount)}</td>
            </tr>"""

    contractor_html = ""
    if invoice.contractor:
        contractor = invoice.contractor
        contractor_html = f"""
    <div class="section">
        <div class="section-title">Contractor Information</div>
        <div><strong>{escape(contractor.name)}</strong></div>
        {f'<div>{escape(contractor.email)}</div>' if contractor.email else ''}
        {f'<div>{escape(contractor.phone)}</div>' if contractor.phone else ''}
        {f'<div>{escape(contractor.address)}</div>' if contractor.address else ''}
    </div>"""

    bill_to_html = ""
    if invoice.bill_to:
        company = invoice.bill_to
        bill_to_html = f"""
    <div class="section">
        <div class="section-title">Bill To</div>
        <div><strong>{escape(company.name)}</strong></div>
        {f'<div>{escape(company.address)}</div>' if company.address else ''}
    </div>"""

    partial = " (Partial Period)" if period.is_partial else ""

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Invoice {escape(invoice.invoice_number)}</title>
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
        .header {{ display: flex; justify-content: space-between; margin-bottom: 30px; }}
        .invoice-title {{ font-size: 24px; font-weight: bold; color: #333; }}
        .invoice-number {{ font-size: 18px; color: #666; }}
        .section {{ margin-bottom: 25px; }}
        .section-title {{ font-size: 16px; font-weight: bold; margin-bottom: 10px; color: #333; }}
        table {{ width: 100%; border-collapse: collapse; margin-bottom: 20px; }}
        th, td {{ padding: 12px; text-align: left; border-bottom: 1px solid #ddd; }}
        th {{ background-color: #f8f9fa; font-weight: bold; }}
        .amount {{ text-align: right; }}
        .total-row {{ font-weight: bold; background-color: #f8f9fa; }}
        .period-info {{ background-color: #e3f2fd; padding: 15px; border-radius: 5px; margin-bottom: 20px; }}
    </style>
</head>
<body>
    <div class="header">
        <div>
            <div class="invoice-title">INVOICE</div>
            <div class="invoice-number">{escape(invoice.invoice_number)}</div>
        </div>
        <div>
            <div><strong>Generated:</strong> {_long_date(invoice.generated_at.date())}</div>
            <div><strong>Due Date:</strong> {_long_date(invoice.due_date)}</div>
        </div>
    </div>
    {contractor_html}
    {bill_to_html}

    <div class="period-info">
        <div class="section-title">Pay Period Information</div>
        <div><strong>Period:</strong> {period.period_number} ({_long_date(period.start_date)} - {_long_date(period.end_date)})</div>
        <div><strong>Days in Period:</strong> {period.days_in_period}{partial}</div>
        <div><strong>Payment Date:</strong> {_long_date(invoice.payment_date)}</div>
    </div>

    <div class="section">
        <div class="section-title">Services Provided</div>
        <table>
            <thead>
                <tr>
                    <th>Description</th>
                    <th>Quantity</th>
                    <th>Rate</th>
                    <th class="amount">Amount</th>
                </tr>
            </thead>
            <tbody>
                {items_html}
            </tbody>
        </table>
    </div>

    <div class="section">
        <table>
            <tr>
                <td><strong>Subtotal:</strong></td>
                <td class="amount">{format_currency(invoice.subtotal)}</td>
            </tr>
            <tr>
                <td><strong>{tax_label(invoice.tax_rate)}:</strong></td>
                <td class="amount">{format_currency(invoice.tax)}</td>
            </tr>
            <tr class="total-row">
                <td><strong>Total:</strong></td>
                <td class="amount">{format_currency(invoice.total)}</td>
            </tr>
        </table>
    </div>

    <div class="section">
        <div class="section-title">Period Summary</div>
        <ul>
            <li>Total Days Worked: {summary.total_days_worked.normalize():f}</li>
            <li>Truck Days: {summary.total_truck_days}</li>
            <li>Travel Kilometers: {summary.total_travel_km.normalize():f}</li>
            <li>Subsistence Days: {summary.total_subsistence_days}</li>
            <li>Average Daily Rate: {format_currency(summary.average_daily_rate)}</li>
        </ul>
    </div>
</body>
</html>"""

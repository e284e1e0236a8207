"""Display-ready values for invoice list and detail views."""

from datetime import date, datetime
from decimal import Decimal

from src.modules.invoices.models import Invoice, InvoiceStatus
from src.modules.invoices.schemas import (
    InvoiceDisplay,
    InvoiceLineItemDisplay,
    StatusBadge,
)
from src.shared.utils.money import round_money

NOT_AVAILABLE = "N/A"

CURRENCY_SYMBOLS = {
    "GHS": "GH₵",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "NGN": "₦",
    "KES": "KSh",
}

STATUS_STYLES = {
    InvoiceStatus.PENDING: "default",
    InvoiceStatus.PAID: "success",
    InvoiceStatus.PARTIALLY_PAID: "secondary",
    InvoiceStatus.OVERDUE: "destructive",
    InvoiceStatus.CANCELLED: "outline",
    InvoiceStatus.REFUNDED: "outline",
}


def format_currency(amount: Decimal | float | int | str | None, currency: str = "GHS") -> str:
    """
    Format an amount with currency symbol, thousands separators and 2 decimals.

    Examples:
        >>> format_currency(Decimal("1234.5"))
        'GH₵1,234.50'
        >>> format_currency("10", "XOF")
        'XOF 10.00'
        >>> format_currency(None)
        'N/A'
    """
    if amount is None:
        return NOT_AVAILABLE
    try:
        value = round_money(amount)
    except ValueError:
        return NOT_AVAILABLE

    code = (currency or "").upper()
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{digits}"
    return f"{sign}{code} {digits}".strip()


def format_display_date(value: date | datetime | str | None) -> str:
    """Format a date as ``01 Sep 2024``."""
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return NOT_AVAILABLE
    if not isinstance(value, date):
        return NOT_AVAILABLE
    return value.strftime("%d %b %Y")


def status_badge(status: str | None) -> StatusBadge:
    """Map a status to its label and badge style."""
    if not status:
        return StatusBadge(label=NOT_AVAILABLE, style="default")
    try:
        style = STATUS_STYLES[InvoiceStatus(status)]
    except ValueError:
        style = "default"
    return StatusBadge(label=status.replace("_", " ").title(), style=style)


def present_invoice(invoice: Invoice, currency: str = "GHS") -> InvoiceDisplay:
    """Build the display block of an invoice."""
    return InvoiceDisplay(
        total_amount=format_currency(invoice.total_amount, currency),
        paid_amount=format_currency(invoice.paid_amount, currency),
        amount_due=format_currency(invoice.amount_due, currency),
        issue_date=format_display_date(invoice.issue_date),
        due_date=format_display_date(invoice.due_date),
        status=status_badge(invoice.status),
        line_items=[
            InvoiceLineItemDisplay(
                description=line.description,
                unit_price=format_currency(line.unit_price, currency),
                amount=format_currency(line.amount, currency),
            )
            for line in invoice.line_items
        ],
    )

"""Line amounts and invoice totals in exact decimal arithmetic."""

from collections.abc import Iterable
from decimal import Decimal

from src.shared.utils.money import ZERO, round_money, to_decimal


def line_amount(quantity: int, unit_price: Decimal) -> Decimal:
    """quantity x unit_price, rounded to cents."""
    return round_money(Decimal(quantity) * to_decimal(unit_price))


def compute_totals(lines: Iterable[tuple[int, Decimal]]) -> tuple[list[Decimal], Decimal]:
    """
    Compute each line amount and the invoice total.

    The total is the sum of the already rounded line amounts, so it always
    matches what is stored on the lines.

    Returns:
        Tuple of (line_amounts, total_amount)

    Example:
        >>> compute_totals([(1, Decimal("500.00")), (2, Decimal("25.50"))])[1]
        Decimal('551.00')
    """
    amounts = [line_amount(quantity, unit_price) for quantity, unit_price in lines]
    return amounts, round_money(sum(amounts, ZERO))

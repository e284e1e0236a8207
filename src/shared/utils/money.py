from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

# Type alias for money values
Money = Decimal

ZERO = Decimal("0.00")

# Largest value a Numeric(10, 2) column holds
MONEY_MAX = Decimal("99999999.99")


def to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Convert a numeric value to Decimal without binary float drift.

    Floats go through their shortest repr, so 33.33 becomes Decimal('33.33')
    rather than Decimal('33.3299999999999982946974341757595539093017578125').

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Raises:
        ValueError: If the value is not a finite number or has too many digits to round

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money("10.115")
        Decimal('10.12')
    """
    value = to_decimal(value)
    try:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range: {value}") from e

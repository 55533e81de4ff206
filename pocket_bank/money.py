"""
Amount Parsing Module

Converts user input into Decimal amounts rounded to a fixed number of
decimal places. NEVER uses float for balances.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from .errors import InvalidAmountError

AmountInput = Union[str, int, float, Decimal, None]


def quantize(amount: Decimal, precision: int = 2) -> Decimal:
    """Round an amount to ``precision`` decimal places"""
    return amount.quantize(Decimal('0.1') ** precision, rounding=ROUND_HALF_UP)


def parse_amount(raw: AmountInput, precision: int = 2) -> Decimal:
    """
    Parse a raw amount into a rounded Decimal.

    Args:
        raw: User input (string) or a number
        precision: Decimal places to keep

    Returns:
        Rounded Decimal amount (sign is not checked here)

    Raises:
        InvalidAmountError: If the value is missing, unparseable, NaN or infinite
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError(raw)

    try:
        if isinstance(raw, Decimal):
            amount = raw
        elif isinstance(raw, str):
            amount = Decimal(raw.strip())
        else:
            amount = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(raw)

    if not amount.is_finite():
        raise InvalidAmountError(raw)

    try:
        return quantize(amount, precision)
    except InvalidOperation:
        # Too many digits for the decimal context
        raise InvalidAmountError(raw)


def parse_positive_amount(raw: AmountInput, precision: int = 2) -> Decimal:
    """Parse an amount that must be strictly greater than zero after rounding"""
    amount = parse_amount(raw, precision)
    if amount <= Decimal('0'):
        raise InvalidAmountError(raw)
    return amount


def format_amount(amount: Decimal, precision: int = 2) -> str:
    """Format for display"""
    return f"{amount:,.{precision}f}"

"""
Money helpers
Amounts carry two decimal places and are held as Decimal, never float.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENTS = Decimal("0.01")

def to_money(amount: Union[Decimal, str, int, float]) -> Decimal:
    """Quantize to cents, rounding halves up.

    Floats go through ``str`` first so 450.15 stays 450.15.

        >>> to_money("45.015")
        Decimal('45.02')
    """
    if isinstance(amount, float):
        amount = str(amount)
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)

def parse_money(amount) -> Union[Decimal, None]:
    """Like ``to_money`` but returns None for values that are not numbers"""
    try:
        value = to_money(amount)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return value if value.is_finite() else None

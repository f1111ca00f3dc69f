# decimal helpers for money amounts; nothing here goes through float math

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from utils import config

ZERO = Decimal("0")
CENT = Decimal("0.01")

MoneyLike = Union[Decimal, int, str, float]


def to_money(value: Optional[MoneyLike]) -> Decimal:
    """
    Coerce a user or database value into a Decimal.

    Floats go through their shortest repr so 9.99 stays 9.99, None becomes 0.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_money(amount: Optional[Decimal], places: int = 2) -> Decimal:
    if amount is None:
        return ZERO
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def round_currency(amount: Optional[Decimal]) -> Decimal:
    return round_money(amount, 2)


def format_currency(amount: Optional[Decimal], symbol: Optional[str] = None) -> str:
    if amount is None:
        return ""
    symbol = config.CURRENCY_SYMBOL if symbol is None else symbol
    rounded = round_currency(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


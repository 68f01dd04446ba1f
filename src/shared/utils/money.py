from collections.abc import Iterable
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Union

from src.core.config import settings

# Type alias for money values
Money = Decimal


def _quantum(decimals: int) -> Decimal:
    return Decimal(1).scaleb(-decimals)


def round_money(
    value: Union[Decimal, float, int, str],
    decimals: int | None = None,
) -> Decimal:
    """
    Round monetary value to the currency's minor unit using ROUND_HALF_UP.

    ``decimals`` defaults to ``settings.currency_decimals`` (0 for VND).

    Examples:
        >>> round_money(200000.5)
        Decimal('200001')
        >>> round_money("10.125", decimals=2)
        Decimal('10.13')
    """
    if decimals is None:
        decimals = settings.currency_decimals
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if value < 0:
        return value.quantize(_quantum(decimals), rounding=ROUND_HALF_DOWN)
    return value.quantize(_quantum(decimals), rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Union[Decimal, int]]) -> Decimal:
    """Sum amounts exactly; the start value keeps the result a Decimal for empty input."""
    return sum((Decimal(v) for v in values), Decimal("0"))


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """Exact Decimal for an upstream amount, no rounding. Floats go through str()."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

"""
Fixed-point arithmetic for exchange rates.

Every division is rounded to RATE_SCALE fractional digits with half-up
rounding, so chained derivations (invert a cross rate, and so on) see the
same value that ends up in the database.
"""
from decimal import ROUND_HALF_UP, Decimal, localcontext

from domain.exceptions.currency import ErrorKind, ExchangeError

RATE_SCALE = 8
AMOUNT_SCALE = 2

# Largest amount accepted for conversion
MAX_AMOUNT = Decimal("1000000000000000")

_RATE_QUANTUM = Decimal(1).scaleb(-RATE_SCALE)
_AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_SCALE)

# Enough significant digits that quantizing never runs out of precision
_PRECISION = 40


def quantize_rate(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return value.quantize(_RATE_QUANTUM, rounding=ROUND_HALF_UP)


def convert_amount(amount: Decimal, rate: Decimal) -> Decimal:
    """Multiply exactly, then round once to AMOUNT_SCALE."""
    with localcontext() as ctx:
        ctx.prec = max(_PRECISION, len(amount.as_tuple().digits) + len(rate.as_tuple().digits))
        product = amount * rate
        ctx.prec = max(ctx.prec, product.adjusted() + AMOUNT_SCALE + 2)
        return product.quantize(_AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


def _divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ctx.rounding = ROUND_HALF_UP
        return (numerator / denominator).quantize(_RATE_QUANTUM, rounding=ROUND_HALF_UP)


def invert(rate: Decimal | None) -> Decimal:
    """
    Invert an exchange rate.

    EUR/SEK = 11.5 gives SEK/EUR = 1 / 11.5 = 0.08695652.
    """
    if rate is None or rate == 0:
        raise ExchangeError(ErrorKind.INVALID_RATE, "Rate cannot be null or zero")
    return _divide(Decimal(1), rate)


def cross_rate(numerator: Decimal | None, denominator: Decimal | None) -> Decimal:
    """
    Divide two rates quoted against a common currency.

    EUR/USD = USD/SEK / EUR/SEK
    """
    if numerator is None or denominator is None:
        raise ExchangeError(ErrorKind.INVALID_RATE, "Rates cannot be null")
    if denominator == 0:
        raise ExchangeError(ErrorKind.INVALID_RATE, "Denominator rate cannot be zero")
    return _divide(numerator, denominator)

from decimal import Decimal

from domain.calculations.rate_math import cross_rate, invert, quantize_rate
from domain.models.currency import Currency, CurrencyPair

EUR_SEK = CurrencyPair(Currency.EUR, Currency.SEK)
USD_SEK = CurrencyPair(Currency.USD, Currency.SEK)
EUR_USD = CurrencyPair(Currency.EUR, Currency.USD)


def _add_with_inverse(rates: dict[CurrencyPair, Decimal], pair: CurrencyPair, rate: Decimal) -> None:
    rates[pair] = quantize_rate(rate)
    rates[pair.inverse()] = invert(rate)


def build_rate_set(
    eur_to_sek: Decimal | None, usd_to_sek: Decimal | None
) -> dict[CurrencyPair, Decimal]:
    """
    Expand the two observed SEK base rates into every pair they determine.

    The source only quotes against SEK, so EUR/USD is derived through SEK
    and only when both observations are present.
    """
    rates: dict[CurrencyPair, Decimal] = {}

    if eur_to_sek is not None:
        _add_with_inverse(rates, EUR_SEK, eur_to_sek)

    if usd_to_sek is not None:
        _add_with_inverse(rates, USD_SEK, usd_to_sek)

    if eur_to_sek is not None and usd_to_sek is not None:
        _add_with_inverse(rates, EUR_USD, cross_rate(usd_to_sek, eur_to_sek))

    return rates

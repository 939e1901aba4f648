from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from domain.exceptions.currency import ErrorKind, ExchangeError


class Currency(StrEnum):
    SEK = "SEK"
    EUR = "EUR"
    USD = "USD"

    @classmethod
    def parse(cls, code: str | None) -> "Currency":
        """Normalize a raw currency code and check it against the supported set."""
        if code is None or not code.strip():
            raise ExchangeError(ErrorKind.INVALID_CURRENCY, "Currency code cannot be null or empty")

        normalized = code.strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(c.value for c in cls)
            raise ExchangeError(
                ErrorKind.UNSUPPORTED_CURRENCY,
                f"Currency '{normalized}' is not supported. Supported currencies: {supported}",
            ) from None


@dataclass(frozen=True)
class CurrencyPair:
    from_currency: Currency
    to_currency: Currency

    @property
    def key(self) -> str:
        return f"{self.from_currency}/{self.to_currency}"

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.to_currency, self.from_currency)

    @classmethod
    def from_key(cls, key: str) -> "CurrencyPair":
        parts = key.split("/") if key else []
        if len(parts) != 2:
            raise ValueError(f"Invalid currency pair key: {key}")
        return cls(Currency.parse(parts[0]), Currency.parse(parts[1]))

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class ExchangeRate:
    pair: CurrencyPair
    rate: Decimal
    last_updated: datetime
    created_at: datetime

    @property
    def from_currency(self) -> Currency:
        return self.pair.from_currency

    @property
    def to_currency(self) -> Currency:
        return self.pair.to_currency


@dataclass(frozen=True)
class RatesSnapshot:
    rates: list[ExchangeRate]
    last_updated: datetime | None  # Max last_updated across rates

    @classmethod
    def from_rates(cls, rates: list[ExchangeRate]) -> "RatesSnapshot":
        latest = max((r.last_updated for r in rates), default=None)
        return cls(rates=rates, last_updated=latest)


@dataclass(frozen=True)
class ConversionResult:
    original_amount: Decimal
    converted_amount: Decimal
    rate: Decimal
    from_currency: Currency
    to_currency: Currency

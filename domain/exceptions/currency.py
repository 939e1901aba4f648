from enum import Enum


class ErrorKind(Enum):
    INVALID_AMOUNT = "invalid_amount"
    INVALID_CURRENCY = "invalid_currency"
    UNSUPPORTED_CURRENCY = "unsupported_currency"
    INVALID_RATE = "invalid_rate"
    RATE_NOT_FOUND = "rate_not_found"
    NO_RATES_AVAILABLE = "no_rates_available"
    RATE_SOURCE_UNAVAILABLE = "rate_source_unavailable"
    CACHE_UNAVAILABLE = "cache_unavailable"


class ExchangeError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ExchangeError({self.kind.name}, {self.message!r})"

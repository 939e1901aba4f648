from datetime import date, datetime
from decimal import Decimal
from typing import Protocol

from domain.models.currency import CurrencyPair, ExchangeRate


class RateStore(Protocol):
    async def upsert(self, pair: CurrencyPair, rate: Decimal, timestamp: datetime) -> ExchangeRate:
        ...

    async def find(self, pair: CurrencyPair) -> ExchangeRate | None:
        ...

    async def exists(self, pair: CurrencyPair) -> bool:
        ...

    async def list_all(self) -> list[ExchangeRate]:
        ...

    async def delete(self, pair: CurrencyPair) -> bool:
        ...


class RateSource(Protocol):
    @property
    def name(self) -> str:
        ...

    async def fetch_latest_rate(self, pair: CurrencyPair, today: date | None = None) -> Decimal | None:
        ...

    async def close(self) -> None:
        ...

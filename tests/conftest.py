"""
Shared fixtures: an in-memory rate store, a scripted rate source and a
deterministic clock, plus an in-memory SQLite database for persistence tests.
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio

from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.models.currency import CurrencyPair, ExchangeRate
from infrastructure.persistence.database import Database


class InMemoryRateStore:
    def __init__(self):
        self.rows: dict[CurrencyPair, ExchangeRate] = {}
        self.calls: list[str] = []

    def seed(self, pair: CurrencyPair, rate: str, timestamp: datetime) -> ExchangeRate:
        record = ExchangeRate(pair=pair, rate=Decimal(rate), last_updated=timestamp, created_at=timestamp)
        self.rows[pair] = record
        return record

    async def upsert(self, pair, rate, timestamp):
        self.calls.append("upsert")
        if rate is None or rate <= 0:
            raise ExchangeError(ErrorKind.INVALID_RATE, f"Rate for {pair} must be positive")
        existing = self.rows.get(pair)
        created_at = existing.created_at if existing else timestamp
        record = ExchangeRate(pair=pair, rate=rate, last_updated=timestamp, created_at=created_at)
        self.rows[pair] = record
        return record

    async def find(self, pair):
        self.calls.append("find")
        return self.rows.get(pair)

    async def exists(self, pair):
        self.calls.append("exists")
        return pair in self.rows

    async def list_all(self):
        self.calls.append("list_all")
        return list(self.rows.values())

    async def delete(self, pair):
        self.calls.append("delete")
        return self.rows.pop(pair, None) is not None


class ScriptedRateSource:
    """Returns a fixed value, or raises a fixed error, per base pair."""

    def __init__(self, responses: dict[CurrencyPair, Decimal | Exception | None]):
        self.responses = responses
        self.requested: list[CurrencyPair] = []

    @property
    def name(self) -> str:
        return "scripted"

    async def fetch_latest_rate(self, pair, today=None):
        self.requested.append(pair)
        value = self.responses.get(pair)
        if isinstance(value, Exception):
            raise value
        return value

    async def close(self) -> None:
        pass


class SteppingClock:
    def __init__(self, start: datetime = datetime(2025, 11, 3, 10, 0, 0), step: timedelta = timedelta(minutes=5)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def rate_store() -> InMemoryRateStore:
    return InMemoryRateStore()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def make_source():
    def _make(responses: dict[CurrencyPair, Decimal | Exception | None]) -> ScriptedRateSource:
        return ScriptedRateSource(responses)
    return _make


@pytest_asyncio.fixture
async def database():
    db = Database("sqlite+aiosqlite://")
    await db.create_tables()
    yield db
    await db.close()

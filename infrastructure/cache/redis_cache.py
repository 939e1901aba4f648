import json
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from redis import asyncio as redis
from redis.exceptions import RedisError

from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.models.currency import CurrencyPair, ExchangeRate


class RedisCacheService:
    def __init__(self, redis_client: redis.Redis, rate_ttl: timedelta = timedelta(minutes=5)):
        self.redis = redis_client
        self.rate_ttl = rate_ttl

    def _make_rate_key(self, pair: CurrencyPair) -> str:
        return f"rate:{pair.from_currency}:{pair.to_currency}"

    async def get_rate(self, pair: CurrencyPair) -> ExchangeRate | None:
        key = self._make_rate_key(pair)
        try:
            data = await self.redis.get(key)
        except RedisError as e:
            raise ExchangeError(ErrorKind.CACHE_UNAVAILABLE, f"Cache read failed for {key}: {e}") from e

        if not data:
            return None

        try:
            rate_dict = json.loads(data)
            return ExchangeRate(
                pair=CurrencyPair.from_key(rate_dict["pair"]),
                rate=Decimal(rate_dict["rate"]),
                last_updated=datetime.fromisoformat(rate_dict["last_updated"]),
                created_at=datetime.fromisoformat(rate_dict["created_at"]),
            )
        except (ValueError, KeyError, TypeError, InvalidOperation, ExchangeError) as e:
            raise ExchangeError(ErrorKind.CACHE_UNAVAILABLE, f"Invalid json data for {key}") from e

    async def set_rate(self, rate: ExchangeRate) -> None:
        key = self._make_rate_key(rate.pair)

        rate_dict = {
            "pair": rate.pair.key,
            "rate": str(rate.rate),
            "last_updated": rate.last_updated.isoformat(),
            "created_at": rate.created_at.isoformat(),
        }

        try:
            await self.redis.setex(key, self.rate_ttl, json.dumps(rate_dict))
        except RedisError as e:
            raise ExchangeError(ErrorKind.CACHE_UNAVAILABLE, f"Cache write failed for {key}: {e}") from e

    async def evict_rate(self, pair: CurrencyPair) -> None:
        key = self._make_rate_key(pair)
        try:
            await self.redis.delete(key)
        except RedisError as e:
            raise ExchangeError(ErrorKind.CACHE_UNAVAILABLE, f"Cache evict failed for {key}: {e}") from e

    async def ping(self) -> bool:
        return bool(await self.redis.ping())

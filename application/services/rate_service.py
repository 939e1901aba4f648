import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from application.services.currency_service import CurrencyService
from domain.calculations.rate_math import cross_rate
from domain.calculations.rate_set import EUR_SEK, USD_SEK, build_rate_set
from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.interfaces import RateSource, RateStore
from domain.models.currency import Currency, CurrencyPair, ExchangeRate, RatesSnapshot
from domain.time import utc_now

logger = logging.getLogger(__name__)


class RateService:
    """
    Keeps the stored rate table in step with the rate source.

    A refresh fetches the two SEK base rates, stores every direct and inverse
    rate they determine, then fills any pair still missing from the table by
    crossing through the pivot currency. Pairs that cannot be recomputed keep
    whatever value they had before.
    """

    def __init__(
        self,
        store: RateStore,
        source: RateSource,
        currency_service: CurrencyService,
        pivot: Currency = Currency.SEK,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.source = source
        self.currency_service = currency_service
        self.pivot = pivot
        self.clock = clock

    @property
    def currencies(self) -> tuple[Currency, ...]:
        return self.currency_service.supported

    async def refresh_rates(self) -> RatesSnapshot:
        logger.info(f"Refreshing exchange rates from {self.source.name}")

        eur_to_sek, usd_to_sek = await self._fetch_base_rates()
        if eur_to_sek is None and usd_to_sek is None:
            logger.error(f"No rates received from {self.source.name}")
            raise ExchangeError(
                ErrorKind.NO_RATES_AVAILABLE, f"No rates available from {self.source.name}"
            )

        timestamp = self.clock()

        written = 0
        for pair, rate in build_rate_set(eur_to_sek, usd_to_sek).items():
            if not self._is_enabled(pair):
                continue
            await self.store.upsert(pair, rate, timestamp)
            written += 1

        derived = await self._complete_cross_rates(timestamp)

        snapshot = RatesSnapshot.from_rates(await self.store.list_all())
        logger.info(
            f"Refreshed exchange rates: {written} direct/inverse, {derived} cross, "
            f"{len(snapshot.rates)} stored"
        )
        return snapshot

    async def get_latest_rates(self) -> RatesSnapshot:
        rates = await self.store.list_all()
        if not rates:
            logger.warning("No exchange rates found in database")
        return RatesSnapshot.from_rates(rates)

    async def get_rate(self, from_currency: str | None, to_currency: str | None) -> ExchangeRate:
        pair = CurrencyPair(
            self.currency_service.validate_currency(from_currency),
            self.currency_service.validate_currency(to_currency),
        )

        if pair.from_currency == pair.to_currency:
            now = self.clock()
            return ExchangeRate(pair=pair, rate=Decimal(1), last_updated=now, created_at=now)

        rate = await self.store.find(pair)
        if rate is None:
            logger.error(f"Exchange rate not found: {pair}")
            raise ExchangeError(
                ErrorKind.RATE_NOT_FOUND,
                f"Exchange rate not found for {pair.from_currency} to {pair.to_currency}",
            )
        return rate

    async def delete_rate(self, from_currency: str | None, to_currency: str | None) -> None:
        pair = CurrencyPair(
            self.currency_service.validate_currency(from_currency),
            self.currency_service.validate_currency(to_currency),
        )
        if pair.from_currency == pair.to_currency:
            raise ExchangeError(ErrorKind.INVALID_CURRENCY, "Same-currency rates are never stored")

        if not await self.store.delete(pair):
            raise ExchangeError(
                ErrorKind.RATE_NOT_FOUND,
                f"Exchange rate not found for {pair.from_currency} to {pair.to_currency}",
            )
        logger.info(f"Deleted exchange rate {pair}")

    async def _fetch_base_rates(self) -> tuple[Decimal | None, Decimal | None]:
        eur_to_sek, usd_to_sek = await asyncio.gather(
            self._fetch_observation(EUR_SEK),
            self._fetch_observation(USD_SEK),
        )
        return eur_to_sek, usd_to_sek

    async def _fetch_observation(self, pair: CurrencyPair) -> Decimal | None:
        try:
            return await self.source.fetch_latest_rate(pair)
        except ExchangeError as e:
            logger.error(f"Rate source {self.source.name} failed for {pair}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error fetching {pair} from {self.source.name}: {e}", exc_info=True)
        return None

    async def _complete_cross_rates(self, timestamp: datetime) -> int:
        derived = 0
        for first in self.currencies:
            for second in self.currencies:
                if first == second:
                    continue

                pair = CurrencyPair(first, second)
                if await self.store.exists(pair):
                    continue

                try:
                    first_to_pivot = await self._rate_to_pivot(first)
                    second_to_pivot = await self._rate_to_pivot(second)
                    if first_to_pivot is None or second_to_pivot is None:
                        logger.debug(f"Cannot derive {pair} via {self.pivot}: missing leg")
                        continue

                    rate = cross_rate(second_to_pivot, first_to_pivot)
                    await self.store.upsert(pair, rate, timestamp)
                    derived += 1
                except ExchangeError as e:
                    logger.warning(f"Failed to generate cross rate for {pair}: {e}")

        return derived

    async def _rate_to_pivot(self, currency: Currency) -> Decimal | None:
        if currency == self.pivot:
            return Decimal(1)
        stored = await self.store.find(CurrencyPair(currency, self.pivot))
        return stored.rate if stored is not None else None

    def _is_enabled(self, pair: CurrencyPair) -> bool:
        return pair.from_currency in self.currencies and pair.to_currency in self.currencies

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.models.currency import Currency, CurrencyPair, ExchangeRate
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.database import run_after_commit
from infrastructure.persistence.models.exchange_rate import ExchangeRateDB

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {'sqlite': sqlite_insert, 'postgresql': pg_insert}


class ExchangeRateRepository:
	"""SQLAlchemy-backed rate table, one row per ordered currency pair."""

	def __init__(self, db_session: AsyncSession, cache_service: RedisCacheService | None = None):
		self.db_session = db_session
		self.cache = cache_service
		# Once this unit of work has written, reads bypass the cache until commit
		self._has_writes = False
		# Pairs whose cache entries are evicted after the unit of work commits
		self._stale_pairs: set[CurrencyPair] = set()

	async def upsert(self, pair: CurrencyPair, rate: Decimal, timestamp: datetime) -> ExchangeRate:
		if rate is None or rate <= 0:
			raise ExchangeError(ErrorKind.INVALID_RATE, f'Rate for {pair} must be positive, got {rate}')

		dialect = self.db_session.get_bind().dialect.name
		insert = _UPSERT_DIALECTS.get(dialect)
		if insert is not None:
			stmt = insert(ExchangeRateDB).values(
				from_currency=pair.from_currency.value,
				to_currency=pair.to_currency.value,
				rate=rate,
				last_updated=timestamp,
				created_at=timestamp,
			)
			stmt = stmt.on_conflict_do_update(
				index_elements=['from_currency', 'to_currency'],
				set_={'rate': stmt.excluded.rate, 'last_updated': stmt.excluded.last_updated},
			)
			await self.db_session.execute(stmt)
		else:
			await self._select_then_write(pair, rate, timestamp)

		row = await self._get_row(pair, refresh=True)
		if row is None:
			raise RuntimeError(f'Upserted rate {pair} not found after write')

		logger.debug(f'Upserted rate {pair} = {rate}')
		self._mark_stale(pair)
		return self._to_domain(row)

	async def find(self, pair: CurrencyPair) -> ExchangeRate | None:
		cached = await self._cached(pair)
		if cached is not None:
			return cached

		row = await self._get_row(pair)
		if row is None:
			return None

		rate = self._to_domain(row)
		await self._remember(rate)
		return rate

	async def exists(self, pair: CurrencyPair) -> bool:
		stmt = select(ExchangeRateDB.id).filter(
			ExchangeRateDB.from_currency == pair.from_currency.value,
			ExchangeRateDB.to_currency == pair.to_currency.value,
		)
		result = await self.db_session.execute(stmt)
		return result.scalar_one_or_none() is not None

	async def list_all(self) -> list[ExchangeRate]:
		result = await self.db_session.execute(
			select(ExchangeRateDB).order_by(ExchangeRateDB.from_currency, ExchangeRateDB.to_currency)
		)
		return [self._to_domain(row) for row in result.scalars().all()]

	async def delete(self, pair: CurrencyPair) -> bool:
		result = await self.db_session.execute(
			delete(ExchangeRateDB).filter(
				ExchangeRateDB.from_currency == pair.from_currency.value,
				ExchangeRateDB.to_currency == pair.to_currency.value,
			)
		)
		self._mark_stale(pair)
		return result.rowcount > 0

	async def _select_then_write(self, pair: CurrencyPair, rate: Decimal, timestamp: datetime) -> None:
		row = await self._get_row(pair)
		if row is None:
			self.db_session.add(
				ExchangeRateDB(
					from_currency=pair.from_currency.value,
					to_currency=pair.to_currency.value,
					rate=rate,
					last_updated=timestamp,
					created_at=timestamp,
				)
			)
		else:
			row.rate = rate
			row.last_updated = timestamp
		await self.db_session.flush()

	async def _get_row(self, pair: CurrencyPair, refresh: bool = False) -> ExchangeRateDB | None:
		stmt = select(ExchangeRateDB).filter(
			ExchangeRateDB.from_currency == pair.from_currency.value,
			ExchangeRateDB.to_currency == pair.to_currency.value,
		)
		if refresh:
			stmt = stmt.execution_options(populate_existing=True)
		result = await self.db_session.execute(stmt)
		return result.scalar_one_or_none()

	async def _cached(self, pair: CurrencyPair) -> ExchangeRate | None:
		if self.cache is None or self._has_writes:
			return None
		try:
			return await self.cache.get_rate(pair)
		except ExchangeError as e:
			logger.warning(f'Rate cache lookup failed, using database: {e}')
			return None

	async def _remember(self, rate: ExchangeRate) -> None:
		if self.cache is None or self._has_writes:
			return
		try:
			await self.cache.set_rate(rate)
		except ExchangeError as e:
			logger.warning(f'Rate cache write failed: {e}')

	def _mark_stale(self, pair: CurrencyPair) -> None:
		self._has_writes = True
		if self.cache is None:
			return
		if not self._stale_pairs:
			# Evict only once committed; until then other sessions still read the old row
			run_after_commit(self.db_session, self._evict_stale)
		self._stale_pairs.add(pair)

	async def _evict_stale(self) -> None:
		pairs, self._stale_pairs = self._stale_pairs, set()
		for pair in sorted(pairs, key=lambda p: p.key):
			try:
				await self.cache.evict_rate(pair)
			except ExchangeError as e:
				logger.warning(f'Rate cache eviction failed for {pair}: {e}')

	@staticmethod
	def _to_domain(row: ExchangeRateDB) -> ExchangeRate:
		return ExchangeRate(
			pair=CurrencyPair(Currency(row.from_currency), Currency(row.to_currency)),
			rate=row.rate,
			last_updated=row.last_updated,
			created_at=row.created_at,
		)

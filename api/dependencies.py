import logging
from collections.abc import AsyncGenerator
from datetime import timedelta
from typing import Annotated

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from application.services import ConversionService, CurrencyService, RateService
from config.settings import get_settings
from domain.interfaces import RateSource, RateStore
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.exchange_rate import ExchangeRateRepository
from infrastructure.providers import RiksbankProvider

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	redis_client: Redis | None = None
	redis_cache: RedisCacheService | None = None
	rate_source: RateSource | None = None


deps = AppDependencies()


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.db = Database(settings.DATABASE_URL, echo=settings.DEBUG)

	if settings.CACHE_ENABLED:
		deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
		deps.redis_cache = RedisCacheService(
			deps.redis_client, rate_ttl=timedelta(seconds=settings.RATE_CACHE_TTL_SECONDS)
		)
	else:
		logger.info('Rate cache disabled')

	deps.rate_source = RiksbankProvider(
		base_url=settings.RIKSBANK_BASE_URL,
		timeout=settings.RIKSBANK_TIMEOUT,
		lookback_days=settings.RIKSBANK_LOOKBACK_DAYS,
		retry_attempts=settings.RIKSBANK_RETRY_ATTEMPTS,
	)
	logger.info('Dependencies initialized')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.db:
		await deps.db.close()
	if deps.rate_source:
		await deps.rate_source.close()

	deps.db = None
	deps.redis_client = None
	deps.redis_cache = None
	deps.rate_source = None
	logger.info('Cleanup complete')


def get_database() -> Database:
	if deps.db is None:
		raise RuntimeError('Database is not initialized')
	return deps.db


async def get_db_session(
	db: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession, None]:
	async with db.session() as session:
		yield session


def get_redis_cache() -> RedisCacheService | None:
	return deps.redis_cache


def get_rate_source() -> RateSource:
	if deps.rate_source is None:
		raise RuntimeError('Rate source not initialized')
	return deps.rate_source


async def get_rate_repository(
	session: Annotated[AsyncSession, Depends(get_db_session)],
	cache: Annotated[RedisCacheService | None, Depends(get_redis_cache)],
) -> RateStore:
	return ExchangeRateRepository(db_session=session, cache_service=cache)


def get_currency_service() -> CurrencyService:
	return CurrencyService(get_settings().SUPPORTED_CURRENCIES)


async def get_rate_service(
	store: Annotated[RateStore, Depends(get_rate_repository)],
	source: Annotated[RateSource, Depends(get_rate_source)],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> RateService:
	return RateService(store=store, source=source, currency_service=currency_service)


async def get_conversion_service(
	store: Annotated[RateStore, Depends(get_rate_repository)],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> ConversionService:
	return ConversionService(store=store, currency_service=currency_service)

from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from domain.models.currency import Currency


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./currency_exchange.db'

	REDIS_URL: str = 'redis://localhost:6379'
	CACHE_ENABLED: bool = True
	RATE_CACHE_TTL_SECONDS: int = 300

	# Riksbank SWEA open API
	RIKSBANK_BASE_URL: str = 'https://api.riksbank.se/swea/v1'
	RIKSBANK_TIMEOUT: int = 10
	RIKSBANK_LOOKBACK_DAYS: int = 7
	RIKSBANK_RETRY_ATTEMPTS: int = 3

	# Comma separated in the environment, e.g. SUPPORTED_CURRENCIES=SEK,EUR
	SUPPORTED_CURRENCIES: Annotated[list[Currency], NoDecode] = [Currency.SEK, Currency.EUR, Currency.USD]

	# Application
	APP_NAME: str = 'Currency Exchange API'
	DEBUG: bool = False
	CORS_ORIGINS: list[str] = ['http://localhost:5173', 'http://localhost:5174']

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False
	LOG_FILE: str | None = None

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@field_validator('SUPPORTED_CURRENCIES', mode='before')
	@classmethod
	def normalize_currencies(cls, v):
		if isinstance(v, str):
			v = [code for code in v.split(',') if code.strip()]
		return [code.strip().upper() if isinstance(code, str) else code for code in v]

	@field_validator('SUPPORTED_CURRENCIES')
	@classmethod
	def require_pivot_currency(cls, v: list[Currency]):
		if Currency.SEK not in v:
			raise ValueError('SUPPORTED_CURRENCIES must include SEK, the pivot currency')
		return list(dict.fromkeys(v))


@lru_cache
def get_settings() -> Settings:
	return Settings()

import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.calculations.rate_set import EUR_SEK, USD_SEK
from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.models.currency import CurrencyPair

logger = logging.getLogger(__name__)


class RiksbankProvider:
	"""Client for the Riksbank SWEA observations API."""

	BASE_URL = 'https://api.riksbank.se/swea/v1'

	# Riksbank quotes SEK per unit of foreign currency
	SERIES = {
		EUR_SEK: 'SEKEURPMI',
		USD_SEK: 'SEKUSDPMI',
	}

	def __init__(
		self,
		base_url: str = BASE_URL,
		client: httpx.AsyncClient | None = None,
		timeout: int = 10,
		lookback_days: int = 7,
		retry_attempts: int = 3,
		retry_backoff: float = 1.0,
	):
		self.base_url = base_url.rstrip('/')
		self.lookback_days = lookback_days
		self.retry_attempts = max(retry_attempts, 1)
		self.retry_backoff = retry_backoff
		self._client = client or httpx.AsyncClient(timeout=timeout)

	@property
	def name(self) -> str:
		return 'riksbank'

	async def _get(self, url: str) -> httpx.Response:
		retrying = AsyncRetrying(
			stop=stop_after_attempt(self.retry_attempts),
			wait=wait_exponential(multiplier=self.retry_backoff, max=10),
			retry=retry_if_exception_type(httpx.RequestError),
			reraise=True,
		)
		return await retrying(self._client.get, url)

	async def _request(self, endpoint: str) -> list:
		url = f'{self.base_url}/{endpoint}'
		logger.debug(f'Calling Riksbank API: {url}')

		try:
			response = await self._get(url)
			response.raise_for_status()
			if response.status_code == 204 or not response.content:
				return []
			data = response.json()

		except httpx.HTTPStatusError as e:
			raise ExchangeError(
				ErrorKind.RATE_SOURCE_UNAVAILABLE,
				f'Riksbank HTTP error {e.response.status_code}: {e.response.text[:200]}',
			) from e
		except httpx.RequestError as e:
			raise ExchangeError(
				ErrorKind.RATE_SOURCE_UNAVAILABLE, f'Riksbank request failed: {e.__class__.__name__}'
			) from e
		except Exception as e:
			raise ExchangeError(
				ErrorKind.RATE_SOURCE_UNAVAILABLE, f'Riksbank response parsing error: {str(e)}'
			) from e

		if not isinstance(data, list):
			raise ExchangeError(
				ErrorKind.RATE_SOURCE_UNAVAILABLE, 'Riksbank response parsing error: expected a list'
			)
		return data

	async def fetch_observations(self, series_id: str, from_date: date, to_date: date) -> list[dict]:
		return await self._request(
			f'Observations/{series_id}/{from_date.isoformat()}/{to_date.isoformat()}'
		)

	async def fetch_latest_rate(self, pair: CurrencyPair, today: date | None = None) -> Decimal | None:
		"""
		Latest observed rate for a SEK base pair within the lookback window.

		Returns None when the window holds no usable observation. The last
		element of the returned series is taken as the latest, as published.
		"""
		series_id = self.SERIES.get(pair)
		if series_id is None:
			raise ExchangeError(ErrorKind.RATE_SOURCE_UNAVAILABLE, f'No Riksbank series for {pair}')

		to_date = today or date.today()
		from_date = to_date - timedelta(days=self.lookback_days)
		observations = await self.fetch_observations(series_id, from_date, to_date)

		if not observations:
			logger.warning(f'No observations returned for {pair} ({series_id})')
			return None

		latest = observations[-1]
		value = latest.get('value') if isinstance(latest, dict) else None
		if value is None or str(value).strip() == '':
			logger.warning(f'Latest observation has no value for {pair}')
			return None

		try:
			rate = Decimal(str(value).strip())
		except InvalidOperation as e:
			raise ExchangeError(
				ErrorKind.RATE_SOURCE_UNAVAILABLE, f'Failed to parse rate value for {pair}: {value!r}'
			) from e

		if not rate.is_finite() or rate <= 0:
			logger.warning(f'Ignoring non-positive rate for {pair}: {rate}')
			return None

		logger.debug(f'Fetched rate for {pair}: {rate} (date: {latest.get("date")})')
		return rate

	async def close(self) -> None:
		await self._client.aclose()

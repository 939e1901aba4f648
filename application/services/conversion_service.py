import logging
from decimal import Decimal

from application.services.currency_service import CurrencyService
from domain.calculations.rate_math import MAX_AMOUNT, convert_amount
from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.interfaces import RateStore
from domain.models.currency import ConversionResult, CurrencyPair

logger = logging.getLogger(__name__)


class ConversionService:
	def __init__(self, store: RateStore, currency_service: CurrencyService):
		self.store = store
		self.currency_service = currency_service

	async def convert(
		self, amount: Decimal | None, from_currency: str | None, to_currency: str | None
	) -> ConversionResult:
		logger.debug(f'Converting {amount} {from_currency} to {to_currency}')

		if amount is None:
			raise ExchangeError(ErrorKind.INVALID_AMOUNT, 'Amount cannot be null')
		if not amount.is_finite() or amount <= 0:
			raise ExchangeError(ErrorKind.INVALID_AMOUNT, 'Amount must be greater than zero')
		if amount > MAX_AMOUNT:
			raise ExchangeError(ErrorKind.INVALID_AMOUNT, f'Amount must not exceed {MAX_AMOUNT}')

		source = self.currency_service.validate_currency(from_currency)
		target = self.currency_service.validate_currency(to_currency)

		if source == target:
			return ConversionResult(
				original_amount=amount,
				converted_amount=amount,
				rate=Decimal(1),
				from_currency=source,
				to_currency=target,
			)

		pair = CurrencyPair(source, target)
		stored = await self.store.find(pair)
		if stored is None or stored.rate is None or stored.rate <= 0:
			logger.error(f'No usable exchange rate for {pair}')
			raise ExchangeError(ErrorKind.RATE_NOT_FOUND, f'Exchange rate not found for {source} to {target}')

		converted_amount = convert_amount(amount, stored.rate)
		logger.info(f'Converted {amount} {source} to {converted_amount} {target} (rate: {stored.rate})')

		return ConversionResult(
			original_amount=amount,
			converted_amount=converted_amount,
			rate=stored.rate,
			from_currency=source,
			to_currency=target,
		)

import logging
from collections.abc import Sequence

from domain.exceptions.currency import ErrorKind, ExchangeError
from domain.models.currency import Currency

logger = logging.getLogger(__name__)


class CurrencyService:
	def __init__(self, supported: Sequence[Currency] = tuple(Currency)):
		self.supported = tuple(supported)

	def get_supported_currencies(self) -> list[str]:
		return [c.value for c in self.supported]

	def validate_currency(self, code: str | None) -> Currency:
		currency = Currency.parse(code)
		if currency not in self.supported:
			logger.warning(f'Currency {currency} is known but not enabled')
			raise ExchangeError(
				ErrorKind.UNSUPPORTED_CURRENCY,
				f"Currency '{currency}' is not supported. "
				f"Supported currencies: {', '.join(self.get_supported_currencies())}",
			)
		return currency

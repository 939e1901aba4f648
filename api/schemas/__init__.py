from .responses import (
	ConversionResponse,
	ErrorResponse,
	ExchangeRateResponse,
	ExchangeRatesResponse,
	HealthResponse,
	SupportedCurrenciesResponse,
)

__all__ = [
	'ConversionResponse',
	'ErrorResponse',
	'ExchangeRateResponse',
	'ExchangeRatesResponse',
	'HealthResponse',
	'SupportedCurrenciesResponse',
]

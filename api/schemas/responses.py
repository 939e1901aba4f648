from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.models.currency import ConversionResult, ExchangeRate, RatesSnapshot


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversionResponse(CamelModel):
	original_amount: Decimal = Field(..., description='Original amount requested')
	converted_amount: Decimal = Field(..., description='Converted amount, rounded to 2 decimals')
	rate: Decimal = Field(..., description='Exchange rate used for conversion')
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'originalAmount': '100',
				'convertedAmount': '9.15',
				'rate': '0.09150000',
				'fromCurrency': 'SEK',
				'toCurrency': 'EUR',
			}
		}
	)

	@classmethod
	def from_result(cls, result: ConversionResult) -> 'ConversionResponse':
		return cls(
			original_amount=result.original_amount,
			converted_amount=result.converted_amount,
			rate=result.rate,
			from_currency=result.from_currency.value,
			to_currency=result.to_currency.value,
		)


class ExchangeRateResponse(CamelModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	rate: Decimal = Field(..., description='Units of target currency per unit of source currency')
	last_updated: datetime = Field(..., description='When the rate was last written')

	@classmethod
	def from_rate(cls, rate: ExchangeRate) -> 'ExchangeRateResponse':
		return cls(
			from_currency=rate.from_currency.value,
			to_currency=rate.to_currency.value,
			rate=rate.rate,
			last_updated=rate.last_updated,
		)


class ExchangeRatesResponse(CamelModel):
	rates: list[ExchangeRateResponse] = Field(default_factory=list)
	last_updated: datetime | None = Field(None, description='Most recent update across all rates')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'rates': [
					{
						'fromCurrency': 'EUR',
						'toCurrency': 'SEK',
						'rate': '10.93500000',
						'lastUpdated': '2025-11-03T10:30:00',
					}
				],
				'lastUpdated': '2025-11-03T10:30:00',
			}
		}
	)

	@classmethod
	def from_snapshot(cls, snapshot: RatesSnapshot) -> 'ExchangeRatesResponse':
		return cls(
			rates=[ExchangeRateResponse.from_rate(r) for r in snapshot.rates],
			last_updated=snapshot.last_updated,
		)


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')

	model_config = ConfigDict(json_schema_extra={'examples': [{'currencies': ['SEK', 'EUR', 'USD']}]})


class HealthResponse(BaseModel):
	status: str = Field(..., description='Overall status (healthy/degraded/unhealthy)')
	timestamp: datetime = Field(..., description='When the check ran')
	services: dict[str, Any] = Field(..., description='Status of individual services')


class ErrorResponse(BaseModel):
	timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
	status: int = Field(..., description='HTTP status code')
	error: str = Field(..., description='Error summary')
	message: str = Field(..., description='Human-readable detail')

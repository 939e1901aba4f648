import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from api.dependencies import get_rate_service
from api.schemas import ErrorResponse, ExchangeRateResponse, ExchangeRatesResponse
from application.services import RateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/rates', tags=['rates'])

CurrencyPath = Annotated[str, Path(min_length=1, max_length=5)]


@router.get(
	'/latest',
	response_model=ExchangeRatesResponse,
	status_code=status.HTTP_200_OK,
	summary='List all stored exchange rates',
)
async def get_latest_rates(
	service: Annotated[RateService, Depends(get_rate_service)],
) -> ExchangeRatesResponse:
	snapshot = await service.get_latest_rates()
	logger.info(f'Returning {len(snapshot.rates)} exchange rates')
	return ExchangeRatesResponse.from_snapshot(snapshot)


@router.post(
	'/refresh',
	response_model=ExchangeRatesResponse,
	status_code=status.HTTP_200_OK,
	responses={503: {'model': ErrorResponse, 'description': 'No rates available from Riksbank'}},
	summary='Refresh exchange rates from Riksbank',
)
async def refresh_rates(
	service: Annotated[RateService, Depends(get_rate_service)],
) -> ExchangeRatesResponse:
	logger.info('POST /api/rates/refresh - Refreshing exchange rates from Riksbank')
	snapshot = await service.refresh_rates()
	return ExchangeRatesResponse.from_snapshot(snapshot)


@router.get(
	'/{from_currency}/{to_currency}',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	responses={
		400: {'model': ErrorResponse, 'description': 'Invalid currency'},
		404: {'model': ErrorResponse, 'description': 'Exchange rate not found'},
	},
	summary='Get a single exchange rate',
)
async def get_exchange_rate(
	from_currency: CurrencyPath,
	to_currency: CurrencyPath,
	service: Annotated[RateService, Depends(get_rate_service)],
) -> ExchangeRateResponse:
	rate = await service.get_rate(from_currency, to_currency)
	return ExchangeRateResponse.from_rate(rate)


@router.delete(
	'/{from_currency}/{to_currency}',
	status_code=status.HTTP_204_NO_CONTENT,
	responses={404: {'model': ErrorResponse, 'description': 'Exchange rate not found'}},
	summary='Delete a stored exchange rate',
)
async def delete_exchange_rate(
	from_currency: CurrencyPath,
	to_currency: CurrencyPath,
	service: Annotated[RateService, Depends(get_rate_service)],
) -> Response:
	await service.delete_rate(from_currency, to_currency)
	return Response(status_code=status.HTTP_204_NO_CONTENT)

import logging
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_conversion_service, get_currency_service
from api.schemas import ConversionResponse, ErrorResponse, SupportedCurrenciesResponse
from application.services import ConversionService, CurrencyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=['currency'])


@router.get(
	'/convert',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	responses={
		400: {'model': ErrorResponse, 'description': 'Invalid amount or currency'},
		404: {'model': ErrorResponse, 'description': 'Exchange rate not found'},
	},
	summary='Convert currency amount',
)
async def convert_currency(
	amount: Annotated[Decimal, Query(description='Amount to convert, must be positive')],
	from_currency: Annotated[str, Query(alias='from', description='Source currency (SEK, EUR, USD)')],
	to_currency: Annotated[str, Query(alias='to', description='Target currency (SEK, EUR, USD)')],
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	logger.info(f'GET /api/convert - Converting {amount} {from_currency} to {to_currency}')
	result = await service.convert(amount, from_currency, to_currency)
	return ConversionResponse.from_result(result)


@router.get(
	'/currencies',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies(
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> SupportedCurrenciesResponse:
	return SupportedCurrenciesResponse(currencies=service.get_supported_currencies())

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from domain.exceptions.currency import ErrorKind, ExchangeError

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[ErrorKind, tuple[int, str]] = {
	ErrorKind.INVALID_AMOUNT: (status.HTTP_400_BAD_REQUEST, 'Invalid amount'),
	ErrorKind.INVALID_CURRENCY: (status.HTTP_400_BAD_REQUEST, 'Invalid currency'),
	ErrorKind.UNSUPPORTED_CURRENCY: (status.HTTP_400_BAD_REQUEST, 'Currency not supported'),
	ErrorKind.INVALID_RATE: (status.HTTP_400_BAD_REQUEST, 'Invalid exchange rate'),
	ErrorKind.RATE_NOT_FOUND: (status.HTTP_404_NOT_FOUND, 'Exchange rate not found'),
	ErrorKind.NO_RATES_AVAILABLE: (
		status.HTTP_503_SERVICE_UNAVAILABLE,
		'Failed to fetch exchange rates from Riksbank',
	),
	ErrorKind.RATE_SOURCE_UNAVAILABLE: (
		status.HTTP_503_SERVICE_UNAVAILABLE,
		'Exchange rate source unavailable',
	),
	ErrorKind.CACHE_UNAVAILABLE: (status.HTTP_503_SERVICE_UNAVAILABLE, 'Cache unavailable'),
}


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
	body = {
		'timestamp': datetime.now(UTC),
		'status': status_code,
		'error': error,
		'message': message,
	}
	return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(ExchangeError)
	async def exchange_error_handler(request: Request, exc: ExchangeError):
		status_code, error = ERROR_STATUS.get(
			exc.kind, (status.HTTP_500_INTERNAL_SERVER_ERROR, 'An unexpected error occurred')
		)
		if status_code >= 500:
			logger.error(f'{error}: {exc}')
		else:
			logger.warning(f'{error}: {exc}')
		return error_response(status_code, error, str(exc))

	@app.exception_handler(RequestValidationError)
	async def validation_error_handler(request: Request, exc: RequestValidationError):
		problems = '; '.join(
			f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
		)
		logger.warning(f'Invalid request: {problems}')
		return error_response(status.HTTP_400_BAD_REQUEST, 'Invalid request', problems)

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=True)
		return error_response(
			status.HTTP_500_INTERNAL_SERVER_ERROR, 'An unexpected error occurred', str(exc)
		)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import cleanup_dependencies, deps, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import currency, health, rates
from config.logging import configure_logging
from config.settings import get_settings

settings = get_settings()

configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON, log_file=settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	logger.info('Starting Currency Exchange API...')

	init_dependencies()

	if deps.db is None:
		raise RuntimeError('Database not initialized')
	await deps.db.create_tables()

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.CORS_ORIGINS,
	allow_credentials=True,
	allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
	allow_headers=['*'],
	max_age=3600,
)

app.include_router(currency.router)
app.include_router(rates.router)
app.include_router(health.router)
register_exception_handlers(app)

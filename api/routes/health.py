import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.dependencies import get_database, get_redis_cache
from api.schemas import HealthResponse
from domain.time import utc_now
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=['health'])


@router.get(
	'/health',
	response_model=HealthResponse,
	summary='System health check',
	responses={503: {'model': HealthResponse, 'description': 'Database unavailable'}},
)
async def health_check(
	db: Annotated[Database, Depends(get_database)],
	cache: Annotated[RedisCacheService | None, Depends(get_redis_cache)],
):
	services: dict[str, Any] = {}

	try:
		await db.ping()
		services['database'] = {'status': 'healthy'}
	except Exception as e:
		logger.error(f'Database health check failed: {e}')
		services['database'] = {'status': 'unhealthy', 'error': 'Connection failed'}

	if cache is None:
		services['cache'] = {'status': 'disabled'}
	else:
		try:
			await cache.ping()
			services['cache'] = {'status': 'healthy'}
		except Exception as e:
			logger.warning(f'Cache health check failed: {e}')
			services['cache'] = {'status': 'unhealthy', 'error': 'Connection failed'}

	if services['database']['status'] != 'healthy':
		overall = 'unhealthy'
	elif services['cache']['status'] == 'unhealthy':
		overall = 'degraded'
	else:
		overall = 'healthy'

	body = HealthResponse(status=overall, timestamp=utc_now(), services=services)
	if overall == 'unhealthy':
		return JSONResponse(
			status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump(mode='json')
		)
	return body

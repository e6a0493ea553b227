"""Health Check Endpoint."""

from fastapi import APIRouter, status

from hairstyle_tasks import __version__
from hairstyle_tasks.api.schemas import HealthResponse
from hairstyle_tasks.core.dependencies import ContainerDep, SettingsDep
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    status_code=status.HTTP_200_OK,
)
async def health_check(container: ContainerDep, app_settings: SettingsDep) -> HealthResponse:
    """Проверить доступность Redis.

    Без Redis (in-memory режим) сервис считается здоровым.
    """
    redis_ok = True
    if container.redis is not None:
        try:
            redis_ok = bool(await container.redis.ping())
        except Exception as e:
            logger.warning("Redis ping не прошёл", error=str(e))
            redis_ok = False

    return HealthResponse(
        status="ok" if redis_ok else "degraded",
        service=app_settings.app_name,
        version=__version__,
        redis=redis_ok,
    )

"""Hairstyle Tasks - FastAPI Application.

Сборка компонентов, middleware и роутеров.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from redis.asyncio import Redis

from hairstyle_tasks import __version__
from hairstyle_tasks.api import router as api_router
from hairstyle_tasks.core.config import Settings, settings
from hairstyle_tasks.core.dependencies import Container
from hairstyle_tasks.providers import create_kie_registry
from hairstyle_tasks.services import LocalObjectStore, RedisCreditLedger, RedisTaskStore
from hairstyle_tasks.services.task import TaskLifecycleManager, TaskPoller
from hairstyle_tasks.shared.errors import get_trace_id, new_trace_id, set_trace_id, setup_exception_handlers
from hairstyle_tasks.shared.logging import get_logger, setup_logging

logger = get_logger()


class TraceContextMiddleware:
    """Middleware для установки trace_id в контекст запроса."""

    def __init__(self, app: Any) -> None:
        """Инициализация middleware.

        Args:
            app: ASGI приложение.

        """
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        """Установить trace_id из X-Trace-Id или сгенерировать новый."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        trace_id = headers.get(b"x-trace-id", b"").decode()
        if trace_id:
            set_trace_id(trace_id)
        else:
            new_trace_id()

        await self.app(scope, receive, send)


def build_container(app_settings: Settings) -> Container:
    """Собрать Redis-backed компоненты.

    Args:
        app_settings: Настройки приложения

    Returns:
        Container без запущенного poller

    """
    redis_client = Redis.from_url(app_settings.redis.url, decode_responses=False)
    task_store = RedisTaskStore(redis_client)
    ledger = RedisCreditLedger(redis_client)
    object_store = LocalObjectStore(app_settings.storage)
    providers = create_kie_registry(app_settings.kie)

    manager = TaskLifecycleManager(
        task_store=task_store,
        ledger=ledger,
        object_store=object_store,
        providers=providers,
        task_settings=app_settings.tasks,
        storage_settings=app_settings.storage,
    )

    poller = TaskPoller(manager, task_store, app_settings.tasks) if app_settings.tasks.poller_enabled else None

    return Container(
        task_store=task_store,
        ledger=ledger,
        object_store=object_store,
        providers=providers,
        manager=manager,
        redis=redis_client,
        poller=poller,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager для startup/shutdown.

    Args:
        app: FastAPI application

    Yields:
        None

    """
    app_settings: Settings = app.state.settings

    logger.info(
        f"Запуск {app_settings.app_name}...",
        environment=app_settings.environment,
        debug=app_settings.debug,
        callback_url=app_settings.kie.callback_url,
    )

    container = build_container(app_settings)
    app.state.container = container

    if not app_settings.kie.api_key:
        logger.warning("HAIR__KIE__API_KEY не задан, dispatch задач будет падать")

    if container.poller is not None:
        await container.poller.start()

    logger.success(f"{app_settings.app_name} запущен", providers=[k.value for k in container.providers.kinds()])

    try:
        yield
    finally:
        logger.info("Завершение работы приложения...")

        if container.poller is not None:
            await container.poller.stop()

        await container.providers.aclose_all()
        await container.object_store.aclose()

        if container.redis is not None:
            await container.redis.aclose()
            logger.info("Redis отключен")

        logger.success("Завершение работы выполнено")


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Создание и настройка FastAPI приложения.

    Args:
        app_settings: Настройки (для тестов)

    Returns:
        Настроенный экземпляр FastAPI

    """
    setup_logging(app_settings.log, debug=app_settings.debug)

    app = FastAPI(
        title=app_settings.app_name,
        description="Оркестрация AI задач смены причёски: кредиты, провайдеры, webhooks",
        version=__version__,
        lifespan=lifespan,
        debug=app_settings.debug,
    )
    app.state.settings = app_settings

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next: Any) -> Any:
        """Измерить время запроса и вернуть trace_id в заголовках."""
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        response.headers["X-Trace-Id"] = get_trace_id()
        response.headers["X-Duration-Ms"] = str(duration_ms)

        logger.info(
            f"{request.method} {request.url.path} - {response.status_code}",
            duration_ms=duration_ms,
            status_code=response.status_code,
        )
        return response

    # trace_id должен быть установлен до timing middleware
    app.add_middleware(TraceContextMiddleware)

    setup_exception_handlers(app)

    app.include_router(api_router)

    if app_settings.environment == "local":
        app.mount(
            "/static",
            StaticFiles(directory=app_settings.storage.root_dir, check_dir=False),
            name="static",
        )

    if app_settings.environment != "local":
        Instrumentator().instrument(app).expose(app)
        logger.info("Prometheus metrics enabled на /metrics")

    return app


app = create_app()

"""Hairstyle Tasks - Dependencies.

Dependency Injection для FastAPI. Компоненты собираются в lifespan
и кладутся в app.state.container.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request
from redis.asyncio import Redis

from hairstyle_tasks.core.config import Settings
from hairstyle_tasks.providers import ProviderRegistry
from hairstyle_tasks.services import CreditLedger, ObjectStore, TaskStore
from hairstyle_tasks.services.task import TaskLifecycleManager, TaskPoller
from hairstyle_tasks.shared.errors import UnauthorizedError


@dataclass
class Container:
    """Собранные компоненты приложения."""

    task_store: TaskStore
    ledger: CreditLedger
    object_store: ObjectStore
    providers: ProviderRegistry
    manager: TaskLifecycleManager
    redis: Redis | None = None
    poller: TaskPoller | None = None


def get_container(request: Request) -> Container:
    """Получить container из состояния приложения.

    Args:
        request: HTTP запрос FastAPI.

    Returns:
        Container с компонентами.

    """
    return request.app.state.container


def get_manager(container: Annotated[Container, Depends(get_container)]) -> TaskLifecycleManager:
    """Предоставляет lifecycle manager."""
    return container.manager


def get_ledger(container: Annotated[Container, Depends(get_container)]) -> CreditLedger:
    """Предоставляет credit ledger."""
    return container.ledger


def get_current_user(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Идентификатор пользователя из заголовка X-User-Id.

    Аутентификация выполняется снаружи (gateway), сюда приходит готовый ID.

    Raises:
        UnauthorizedError: Заголовок отсутствует или пустой

    """
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError(message="Требуется заголовок X-User-Id")
    return x_user_id.strip()


def get_settings(request: Request) -> Settings:
    """Настройки, с которыми создано приложение."""
    return request.app.state.settings


ContainerDep = Annotated[Container, Depends(get_container)]
ManagerDep = Annotated[TaskLifecycleManager, Depends(get_manager)]
LedgerDep = Annotated[CreditLedger, Depends(get_ledger)]
CurrentUserDep = Annotated[str, Depends(get_current_user)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

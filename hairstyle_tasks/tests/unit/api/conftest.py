"""Fixtures для API тестов: приложение на in-memory компонентах."""

from collections.abc import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI

from hairstyle_tasks.app import create_app
from hairstyle_tasks.core.config import Settings
from hairstyle_tasks.core.dependencies import Container
from hairstyle_tasks.providers import ProviderRegistry
from hairstyle_tasks.services import InMemoryCreditLedger, InMemoryObjectStore, InMemoryTaskStore
from hairstyle_tasks.services.task import TaskLifecycleManager


@pytest.fixture
def app(
    task_store: InMemoryTaskStore,
    ledger: InMemoryCreditLedger,
    object_store: InMemoryObjectStore,
    registry: ProviderRegistry,
    manager: TaskLifecycleManager,
) -> FastAPI:
    """Приложение без lifespan: container подставляется напрямую."""
    application = create_app(Settings())
    application.state.container = Container(
        task_store=task_store,
        ledger=ledger,
        object_store=object_store,
        providers=registry,
        manager=manager,
    )
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP клиент поверх ASGI приложения."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

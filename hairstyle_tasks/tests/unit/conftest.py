"""Pytest configuration для unit тестов."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from hairstyle_tasks.core.config import StorageSettings, TaskSettings
from hairstyle_tasks.core.enums import ProviderKind
from hairstyle_tasks.providers import ProviderRegistry
from hairstyle_tasks.services import InMemoryCreditLedger, InMemoryObjectStore, InMemoryTaskStore
from hairstyle_tasks.services.task import TaskLifecycleManager
from hairstyle_tasks.tests.unit.factories import USER_ID, FakeProvider


@pytest.fixture
def mock_redis() -> MagicMock:
    """Mock Redis client для тестирования."""
    redis = MagicMock()
    redis.hset = AsyncMock()
    redis.hgetall = AsyncMock(return_value={})
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.incrby = AsyncMock(return_value=0)
    redis.rpush = AsyncMock()
    redis.zadd = AsyncMock()
    redis.zrevrange = AsyncMock(return_value=[])
    redis.sadd = AsyncMock()
    redis.srem = AsyncMock()
    redis.srandmember = AsyncMock(return_value=[])
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


@pytest.fixture
def mock_pipeline(mock_redis: MagicMock) -> MagicMock:
    """Mock Redis pipeline: async context manager с WATCH/MULTI."""
    pipe = MagicMock()
    pipe.watch = AsyncMock()
    pipe.unwatch = AsyncMock()
    pipe.get = AsyncMock(return_value=None)
    pipe.hgetall = AsyncMock(return_value={})
    pipe.execute = AsyncMock(return_value=[])
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    mock_redis.pipeline = MagicMock(return_value=pipe)
    return pipe


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    """Task store в памяти."""
    return InMemoryTaskStore()


@pytest.fixture
def ledger() -> InMemoryCreditLedger:
    """Ledger с 10 кредитами у тестового пользователя."""
    return InMemoryCreditLedger({USER_ID: 10})


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def provider_4o() -> FakeProvider:
    return FakeProvider(ProviderKind.KIE_4O)


@pytest.fixture
def provider_kontext() -> FakeProvider:
    return FakeProvider(ProviderKind.KIE_KONTEXT)


@pytest.fixture
def registry(provider_4o: FakeProvider, provider_kontext: FakeProvider) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register(provider_4o)
    registry.register(provider_kontext)
    return registry


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(cdn_url="https://cdn.test/")


@pytest.fixture
def manager(
    task_store: InMemoryTaskStore,
    ledger: InMemoryCreditLedger,
    object_store: InMemoryObjectStore,
    registry: ProviderRegistry,
    storage_settings: StorageSettings,
) -> TaskLifecycleManager:
    """Lifecycle manager на in-memory компонентах."""
    return TaskLifecycleManager(
        task_store=task_store,
        ledger=ledger,
        object_store=object_store,
        providers=registry,
        task_settings=TaskSettings(),
        storage_settings=storage_settings,
    )

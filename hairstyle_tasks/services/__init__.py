"""Сервисный слой: хранилища, учёт кредитов, lifecycle задач."""

from hairstyle_tasks.services.credit_ledger import CreditLedger, InMemoryCreditLedger, RedisCreditLedger
from hairstyle_tasks.services.object_store import (
    InMemoryObjectStore,
    LocalObjectStore,
    ObjectStore,
    StoredObject,
    mirror_result,
    upload_photo,
)
from hairstyle_tasks.services.task_store import InMemoryTaskStore, RedisTaskStore, TaskStore

__all__ = [
    "CreditLedger",
    "InMemoryCreditLedger",
    "InMemoryObjectStore",
    "InMemoryTaskStore",
    "LocalObjectStore",
    "ObjectStore",
    "RedisCreditLedger",
    "RedisTaskStore",
    "StoredObject",
    "TaskStore",
    "mirror_result",
    "upload_photo",
]

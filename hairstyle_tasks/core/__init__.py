"""Hairstyle Tasks - Core module.

Ядро приложения: конфигурация, enum'ы, зависимости.
"""

from hairstyle_tasks.core.config import settings
from hairstyle_tasks.core.enums import ModelType, ProviderKind, TaskStatus

__all__ = [
    "settings",
    "ModelType",
    "ProviderKind",
    "TaskStatus",
]

"""Провайдеры генерации изображений."""

from hairstyle_tasks.providers.base import (
    RESULT_URL_MISSING,
    Failure,
    ImageProvider,
    InProgress,
    ProviderStatus,
    Success,
)
from hairstyle_tasks.providers.kie_4o import Kie4oProvider, parse_progress
from hairstyle_tasks.providers.kie_client import KieClient
from hairstyle_tasks.providers.kie_kontext import KieKontextProvider
from hairstyle_tasks.providers.registry import ProviderRegistry, create_kie_registry

__all__ = [
    "RESULT_URL_MISSING",
    "Failure",
    "ImageProvider",
    "InProgress",
    "Kie4oProvider",
    "KieClient",
    "KieKontextProvider",
    "ProviderRegistry",
    "ProviderStatus",
    "Success",
    "create_kie_registry",
    "parse_progress",
]

"""Provider Registry.

Закрытое соответствие ProviderKind -> ImageProvider.
Новый провайдер = новый член ProviderKind + класс, реализующий ImageProvider.
"""

from hairstyle_tasks.core.config import KieSettings
from hairstyle_tasks.core.enums import ProviderKind
from hairstyle_tasks.providers.base import ImageProvider
from hairstyle_tasks.providers.kie_4o import Kie4oProvider
from hairstyle_tasks.providers.kie_client import KieClient
from hairstyle_tasks.providers.kie_kontext import KieKontextProvider
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()


class ProviderRegistry:
    """Registry провайдеров генерации."""

    def __init__(self) -> None:
        """Инициализировать пустой registry."""
        self._providers: dict[ProviderKind, ImageProvider] = {}
        self._shared: list[KieClient] = []

    def share(self, client: KieClient) -> None:
        """Передать registry общий клиент провайдеров, закрывается один раз в aclose_all."""
        if not any(existing is client for existing in self._shared):
            self._shared.append(client)

    def register(self, provider: ImageProvider) -> None:
        """Зарегистрировать provider под его kind.

        Args:
            provider: Instance провайдера

        Raises:
            ValueError: Если provider такого kind уже зарегистрирован
            TypeError: Если объект не реализует ImageProvider

        """
        if not isinstance(provider, ImageProvider):
            msg = f"{type(provider).__name__} не реализует ImageProvider"
            raise TypeError(msg)

        if provider.kind in self._providers:
            msg = f"Provider '{provider.kind.value}' уже зарегистрирован"
            raise ValueError(msg)

        self._providers[provider.kind] = provider
        logger.info("Provider зарегистрирован", kind=provider.kind.value, provider_type=type(provider).__name__)

    def get(self, kind: ProviderKind) -> ImageProvider:
        """Получить provider по kind.

        Raises:
            KeyError: Если provider не зарегистрирован

        """
        if kind not in self._providers:
            available = ", ".join(k.value for k in self._providers) or "нет доступных"
            msg = f"Provider '{kind.value}' не найден. Доступные: {available}"
            raise KeyError(msg)

        return self._providers[kind]

    def kinds(self) -> list[ProviderKind]:
        """Список зарегистрированных провайдеров."""
        return list(self._providers)

    def __contains__(self, kind: object) -> bool:
        return kind in self._providers

    async def aclose_all(self) -> None:
        """Закрыть ресурсы всех провайдеров."""
        for kind, provider in self._providers.items():
            try:
                await provider.aclose()
            except Exception as e:
                logger.exception("Ошибка закрытия provider", kind=kind.value, error=str(e))

        for client in self._shared:
            try:
                await client.aclose()
            except Exception as e:
                logger.exception("Ошибка закрытия общего клиента", error=str(e))
        self._shared.clear()


def create_kie_registry(config: KieSettings, client: KieClient | None = None) -> ProviderRegistry:
    """Создать registry с обоими Kie провайдерами на общем клиенте.

    Args:
        config: Настройки Kie
        client: Готовый KieClient (для тестов)

    Returns:
        Заполненный ProviderRegistry

    """
    kie = client or KieClient(config)
    registry = ProviderRegistry()
    registry.register(Kie4oProvider(kie, callback_url=config.callback_url, owns_client=False))
    registry.register(KieKontextProvider(kie, callback_url=config.callback_url, owns_client=False))
    registry.share(kie)
    return registry

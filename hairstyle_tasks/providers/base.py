"""Base types и Protocol для провайдеров генерации изображений.

Каждый провайдер приводит свой формат ответа к ProviderStatus -
lifecycle manager работает только с этими тремя вариантами.
"""

from typing import Annotated, Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from hairstyle_tasks.core.enums import ProviderKind
from hairstyle_tasks.models.task import HairColorOption, HairstyleOption

RESULT_URL_MISSING = "Result url not retrieved"


class InProgress(BaseModel):
    """Задача ещё генерируется."""

    kind: Literal["in_progress"] = "in_progress"
    progress: float = Field(default=0.0, ge=0.0, le=1.0, description="Прогресс в долях")


class Success(BaseModel):
    """Провайдер сообщил об успехе. result_url может отсутствовать."""

    kind: Literal["success"] = "success"
    result_url: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict, description="Сырой ответ провайдера")


class Failure(BaseModel):
    """Провайдер сообщил об ошибке генерации."""

    kind: Literal["failure"] = "failure"
    message: str
    raw: dict[str, Any] = Field(default_factory=dict, description="Сырой ответ провайдера")


ProviderStatus = Annotated[InProgress | Success | Failure, Field(discriminator="kind")]


@runtime_checkable
class ImageProvider(Protocol):
    """Protocol для всех провайдеров генерации.

    Использует Protocol вместо ABC для duck typing.
    """

    kind: ProviderKind

    @property
    def aspect(self) -> str:
        """Соотношение сторон результата."""
        ...

    def build_request(
        self,
        photo_url: str,
        hairstyle: HairstyleOption,
        hair_color: HairColorOption,
        detail: str | None = None,
    ) -> dict[str, Any]:
        """Собрать payload для submit (сохраняется в Task.request_param).

        Args:
            photo_url: URL загруженного фото пользователя
            hairstyle: Выбранная причёска
            hair_color: Выбранный цвет (может быть пустым)
            detail: Пожелания пользователя

        Returns:
            Payload в формате API провайдера

        """
        ...

    async def submit(self, request_param: dict[str, Any]) -> str:
        """Отправить задачу провайдеру.

        Args:
            request_param: Payload из build_request

        Returns:
            ID задачи у провайдера

        Raises:
            ProviderError: Ошибка HTTP или ошибка в envelope ответа

        """
        ...

    async def poll(self, provider_task_id: str) -> InProgress | Success | Failure:
        """Запросить статус задачи у провайдера.

        Args:
            provider_task_id: ID задачи у провайдера

        Returns:
            Нормализованный статус

        Raises:
            ProviderError: Ошибка HTTP или ошибка в envelope ответа

        """
        ...

    async def aclose(self) -> None:
        """Освободить ресурсы (HTTP соединения)."""
        ...

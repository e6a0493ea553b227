"""Enums для Hairstyle Tasks.

Централизованное хранилище всех enum'ов проекта.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Статус задачи генерации."""

    PENDING = "pending"  # Создана, ещё не отправлена провайдеру
    RUNNING = "running"  # Отправлена, ждём результат
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Финальный статус, дальнейших переходов нет."""
        return self in (TaskStatus.SUCCEEDED, TaskStatus.FAILED)

    def can_transition_to(self, target: "TaskStatus") -> bool:
        """Проверить, разрешён ли переход (только вперёд)."""
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.RUNNING}),
    TaskStatus.RUNNING: frozenset({TaskStatus.SUCCEEDED, TaskStatus.FAILED}),
    TaskStatus.SUCCEEDED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}


class ProviderKind(str, Enum):
    """Провайдер генерации, к которому привязана задача."""

    KIE_4O = "kie_4o"  # GPT-4o Image через Kie AI
    KIE_KONTEXT = "kie_kontext"  # Flux Kontext через Kie AI

    @property
    def aspect(self) -> str:
        """Соотношение сторон результата, фиксировано для провайдера."""
        return _ASPECTS[self]


_ASPECTS: dict[ProviderKind, str] = {
    ProviderKind.KIE_4O: "2:3",
    ProviderKind.KIE_KONTEXT: "3:4",
}


class ModelType(str, Enum):
    """Выбор модели в запросе клиента."""

    GPT_4O = "gpt-4o"
    KONTEXT = "kontext"

    @property
    def provider(self) -> ProviderKind:
        """Провайдер, обслуживающий эту модель."""
        if self is ModelType.KONTEXT:
            return ProviderKind.KIE_KONTEXT
        return ProviderKind.KIE_4O

"""Доменные модели задач генерации.

Task хранится как плоский набор строковых полей (Redis hash):
dict поля сериализуются через orjson, datetime - ISO 8601.
"""

import secrets
from datetime import UTC, datetime
from typing import Any

import orjson
from pydantic import BaseModel, Field

from hairstyle_tasks.core.enums import ModelType, ProviderKind, TaskStatus

TASK_NO_BYTES = 16

_DATETIME_FIELDS = ("created_at", "estimated_start_at", "started_at", "completed_at")
_JSON_FIELDS = ("request_param", "input_params", "ext", "result_data")


def utcnow() -> datetime:
    """Текущее время в UTC (timezone-aware)."""
    return datetime.now(UTC)


def generate_task_no() -> str:
    """Сгенерировать URL-safe номер задачи."""
    return secrets.token_urlsafe(TASK_NO_BYTES)


class HairstyleOption(BaseModel):
    """Выбранная причёска."""

    name: str = Field(min_length=1, description="Название причёски")
    value: str = Field(description="Идентификатор причёски")
    cover: str | None = Field(default=None, description="URL референс-изображения")
    type: str | None = Field(default=None, description="Категория")


class HairColorOption(BaseModel):
    """Выбранный цвет волос. Пустой value означает "цвет не выбран"."""

    name: str = Field(default="", description="Название цвета")
    value: str = Field(default="", description="HEX значение цвета")
    cover: str | None = Field(default=None, description="URL референс-изображения")
    color: str | None = Field(default=None, description="CSS цвет для UI")
    type: str | None = Field(default=None, description="Категория")

    @property
    def is_selected(self) -> bool:
        """Пользователь выбрал цвет."""
        return bool(self.value)


class Task(BaseModel):
    """Единица работы: одна причёска для одной фотографии."""

    task_no: str = Field(default_factory=generate_task_no, description="Внутренний номер задачи")
    provider_task_id: str | None = Field(default=None, description="ID задачи у провайдера")
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    provider: ProviderKind
    user_id: str
    aspect: str
    created_at: datetime = Field(default_factory=utcnow)
    estimated_start_at: datetime = Field(default_factory=utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    request_param: dict[str, Any] = Field(default_factory=dict)
    input_params: dict[str, Any] = Field(default_factory=dict)
    ext: dict[str, Any] = Field(default_factory=dict)
    result_url: str | None = None
    result_data: dict[str, Any] | None = None
    fail_reason: str | None = None

    def to_record(self) -> dict[str, str]:
        """Сериализовать в плоский dict для хранилища (None поля опускаются)."""
        return encode_fields(self.model_dump(exclude_none=True))

    @classmethod
    def from_record(cls, record: dict[str, str]) -> "Task":
        """Восстановить Task из плоского dict хранилища."""
        data: dict[str, Any] = dict(record)
        for key in _JSON_FIELDS:
            if key in data:
                data[key] = orjson.loads(data[key])
        return cls.model_validate(data)

    def to_result(self) -> "TaskResult":
        """Проекция полей, видимых клиенту."""
        return TaskResult.model_validate(self.model_dump(include=set(TaskResult.model_fields)))


def encode_fields(fields: dict[str, Any]) -> dict[str, str]:
    """Привести значения полей Task к строкам хранилища."""
    encoded: dict[str, str] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key in _JSON_FIELDS:
            encoded[key] = orjson.dumps(value).decode("utf-8")
        elif key in _DATETIME_FIELDS:
            encoded[key] = value.isoformat()
        elif isinstance(value, TaskStatus | ProviderKind):
            encoded[key] = value.value
        else:
            encoded[key] = str(value)
    return encoded


class TaskResult(BaseModel):
    """Ответ клиенту о задаче."""

    task_no: str
    provider_task_id: str | None = None
    created_at: datetime
    status: TaskStatus
    completed_at: datetime | None = None
    aspect: str
    result_url: str | None = None
    fail_reason: str | None = None
    ext: dict[str, Any] = Field(default_factory=dict)


class TaskProgress(BaseModel):
    """Состояние задачи и прогресс в долях [0, 1]."""

    task: TaskResult
    progress: float = Field(ge=0.0, le=1.0)


class CreateBatchRequest(BaseModel):
    """Провалидированный запрос на генерацию."""

    photo: bytes = Field(repr=False)
    photo_filename: str
    photo_content_type: str | None = None
    hairstyles: list[HairstyleOption] = Field(min_length=1)
    hair_color: HairColorOption = Field(default_factory=HairColorOption)
    detail: str = ""
    model_type: ModelType = ModelType.GPT_4O

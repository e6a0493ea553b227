"""Response Schemas для Hairstyle Tasks API."""

from typing import Literal

from pydantic import BaseModel, Field

from hairstyle_tasks.models import Receipt, TaskResult


class BatchResponse(BaseModel):
    """Ответ на создание пакета задач.

    Используется в POST /api/v1/tasks
    """

    tasks: list[TaskResult] = Field(description="Созданные задачи (pending)")
    consumed_credits: Receipt = Field(description="Запись о списании кредитов")


class TaskListResponse(BaseModel):
    """Задачи пользователя."""

    tasks: list[TaskResult]


class CreditsResponse(BaseModel):
    """Баланс пользователя."""

    user_id: str
    balance: int = Field(ge=0)


class HealthResponse(BaseModel):
    """Статус сервиса."""

    status: Literal["ok", "degraded"]
    service: str
    version: str
    redis: bool

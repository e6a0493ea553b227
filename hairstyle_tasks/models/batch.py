"""Результат создания пакета задач."""

from pydantic import BaseModel

from hairstyle_tasks.models.billing import Receipt
from hairstyle_tasks.models.task import TaskResult


class BatchResult(BaseModel):
    """Созданные задачи и запись о списании кредитов за весь пакет."""

    tasks: list[TaskResult]
    receipt: Receipt

"""Доменные модели."""

from hairstyle_tasks.models.batch import BatchResult
from hairstyle_tasks.models.billing import Receipt
from hairstyle_tasks.models.task import (
    CreateBatchRequest,
    HairColorOption,
    HairstyleOption,
    Task,
    TaskProgress,
    TaskResult,
    generate_task_no,
    utcnow,
)

__all__ = [
    "BatchResult",
    "CreateBatchRequest",
    "HairColorOption",
    "HairstyleOption",
    "Receipt",
    "Task",
    "TaskProgress",
    "TaskResult",
    "generate_task_no",
    "utcnow",
]

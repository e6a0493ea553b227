"""Tasks API Routes.

Создание пакета задач и опрос статуса.
"""

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from hairstyle_tasks.api.schemas import BatchResponse, TaskListResponse, parse_batch_form
from hairstyle_tasks.core.dependencies import CurrentUserDep, ManagerDep
from hairstyle_tasks.core.enums import ModelType
from hairstyle_tasks.models import TaskProgress
from hairstyle_tasks.shared.errors import (
    InsufficientCreditsError,
    InvalidReferenceError,
    TaskStateCorruptedError,
    UnauthorizedError,
    UploadFailedError,
    ValidationError,
)
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

router = APIRouter(prefix="/tasks", tags=["tasks"])

# Клиенты опрашивают статус по короткому пути без версии
status_router = APIRouter(tags=["tasks"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Создать пакет задач",
    description="Списывает кредиты (1 за причёску), загружает фото и создаёт pending задачи",
    responses={
        401: UnauthorizedError.openapi_response(),
        402: InsufficientCreditsError.openapi_response(),
        422: ValidationError.openapi_response(),
        502: UploadFailedError.openapi_response(),
    },
)
async def create_tasks(
    manager: ManagerDep,
    user_id: CurrentUserDep,
    photo: Annotated[UploadFile, File(description="Фото пользователя")],
    hairstyle: Annotated[str, Form(description="JSON массив выбранных причёсок")],
    hair_color: Annotated[str | None, Form(description="JSON объект выбранного цвета")] = None,
    detail: Annotated[str | None, Form(description="Пожелания")] = None,
    model_type: Annotated[str, Form(alias="type", description="gpt-4o | kontext")] = ModelType.GPT_4O.value,
) -> BatchResponse:
    """Создать пакет задач генерации.

    Args:
        manager: Lifecycle manager
        user_id: Текущий пользователь
        photo: Загруженное фото
        hairstyle: JSON массив причёсок
        hair_color: JSON объект цвета
        detail: Пожелания пользователя
        model_type: Модель генерации

    Returns:
        Созданные задачи и запись о списании

    """
    request = parse_batch_form(
        photo=await photo.read(),
        photo_filename=photo.filename,
        photo_content_type=photo.content_type,
        hairstyle=hairstyle,
        hair_color=hair_color,
        detail=detail,
        model_type=model_type,
    )

    batch = await manager.create_batch(request, user_id)
    return BatchResponse(tasks=batch.tasks, consumed_credits=batch.receipt)


@router.get(
    "",
    summary="Задачи пользователя",
    responses={401: UnauthorizedError.openapi_response()},
)
async def list_tasks(
    manager: ManagerDep,
    user_id: CurrentUserDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> TaskListResponse:
    """Список задач текущего пользователя, новые первыми."""
    tasks = await manager.list_user_tasks(user_id, limit)
    return TaskListResponse(tasks=tasks)


@status_router.get(
    "/api/task/{task_no}",
    summary="Статус задачи",
    description="Продвигает задачу по state machine и возвращает её состояние с прогрессом [0, 1]",
    responses={
        404: InvalidReferenceError.openapi_response(),
        500: TaskStateCorruptedError.openapi_response(),
    },
)
async def get_task_status(task_no: str, manager: ManagerDep) -> TaskProgress:
    """Получить статус задачи.

    Args:
        task_no: Номер задачи
        manager: Lifecycle manager

    Returns:
        Задача и прогресс

    """
    return await manager.advance(task_no)

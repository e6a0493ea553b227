"""Webhooks от провайдеров генерации.

Отвечает 200 {} всегда: отправителю не сообщаются детали
reconciliation, и повторная доставка ему не нужна.
"""

from typing import Any

import orjson
from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError

from hairstyle_tasks.api.schemas import WebhookPayload
from hairstyle_tasks.core.dependencies import ManagerDep
from hairstyle_tasks.shared.errors import AppException
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/kie-image", summary="Callback Kie AI")
async def kie_image_webhook(request: Request, manager: ManagerDep) -> dict[str, Any]:
    """Принять callback Kie AI и продвинуть задачу."""
    try:
        payload = WebhookPayload.model_validate(orjson.loads(await request.body()))
    except (orjson.JSONDecodeError, PydanticValidationError) as e:
        logger.warning("Невалидный webhook payload", error=str(e))
        return {}

    provider_task_id = payload.data.task_id if payload.data else None
    if not provider_task_id:
        logger.info("Webhook без taskId пропущен", code=payload.code, msg=payload.msg)
        return {}

    logger.info("Webhook получен", provider_task_id=provider_task_id, code=payload.code)

    try:
        progress = await manager.advance_by_provider_id(provider_task_id)
        logger.info(
            "Webhook обработан",
            provider_task_id=provider_task_id,
            task_no=progress.task.task_no,
            status=progress.task.status.value,
        )
    except AppException as e:
        logger.warning("Webhook отклонён", provider_task_id=provider_task_id, **e.log_fields())
    except Exception as e:
        logger.exception("Ошибка обработки webhook", provider_task_id=provider_task_id, error=str(e))

    return {}

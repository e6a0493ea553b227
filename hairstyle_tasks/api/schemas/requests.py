"""Request Schemas для Hairstyle Tasks API.

Форма создания задач приходит как multipart: фото файлом,
hairstyle и hair_color JSON строками.
"""

from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from hairstyle_tasks.core.enums import ModelType
from hairstyle_tasks.models import CreateBatchRequest, HairColorOption, HairstyleOption
from hairstyle_tasks.shared.errors import ValidationError

MAX_PHOTO_BYTES = 10 * 1024 * 1024

_hairstyles_adapter = TypeAdapter(list[HairstyleOption])


def _load_json(field: str, raw: str) -> Any:
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ValidationError(
            message=f"Поле '{field}' должно быть JSON",
            details={"field": field, "reason": str(e)},
        ) from e


def parse_batch_form(
    photo: bytes,
    photo_filename: str | None,
    photo_content_type: str | None,
    hairstyle: str,
    hair_color: str | None = None,
    detail: str | None = None,
    model_type: str = ModelType.GPT_4O.value,
) -> CreateBatchRequest:
    """Собрать CreateBatchRequest из полей multipart формы.

    Args:
        photo: Содержимое файла
        photo_filename: Имя файла (нужно для расширения ключа)
        photo_content_type: MIME тип
        hairstyle: JSON массив причёсок
        hair_color: JSON объект цвета (пустой = не выбран)
        detail: Пожелания пользователя
        model_type: gpt-4o | kontext

    Returns:
        Провалидированный запрос

    Raises:
        ValidationError: Любое поле невалидно

    """
    if not photo:
        raise ValidationError(message="Фото не загружено", details={"field": "photo"})
    if len(photo) > MAX_PHOTO_BYTES:
        raise ValidationError(
            message="Фото слишком большое",
            details={"field": "photo", "size": len(photo), "max_size": MAX_PHOTO_BYTES},
        )

    try:
        styles = _hairstyles_adapter.validate_python(_load_json("hairstyle", hairstyle))
        color = (
            HairColorOption.model_validate(_load_json("hair_color", hair_color))
            if hair_color and hair_color.strip()
            else HairColorOption()
        )
        return CreateBatchRequest(
            photo=photo,
            photo_filename=photo_filename or "photo.png",
            photo_content_type=photo_content_type,
            hairstyles=styles,
            hair_color=color,
            detail=(detail or "").strip(),
            model_type=ModelType(model_type),
        )
    except PydanticValidationError as e:
        raise ValidationError(
            message="Невалидные параметры генерации",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
    except ValueError as e:
        raise ValidationError(
            message=f"Неизвестная модель '{model_type}'",
            details={"field": "type", "allowed": [m.value for m in ModelType]},
        ) from e


class WebhookData(BaseModel):
    """Поле data callback'а Kie AI."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    task_id: str | None = Field(default=None, alias="taskId")
    info: dict[str, Any] | None = None


class WebhookPayload(BaseModel):
    """Callback Kie AI о завершении генерации."""

    model_config = ConfigDict(extra="allow")

    code: int | None = None
    msg: str | None = None
    data: WebhookData | None = None

"""Base exception class for application errors.

Код ошибки выводится из имени класса, сообщение по умолчанию берётся
из первой строки docstring. Details проходят через ErrorDetail.
"""

import re
from typing import Any

from loguru import logger
from pydantic import ValidationError

from hairstyle_tasks.shared.errors.context import get_trace_id
from hairstyle_tasks.shared.errors.schemas import ErrorDetail, ErrorResponse

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def code_from_class_name(name: str) -> str:
    """InsufficientCreditsError -> INSUFFICIENT_CREDITS."""
    for suffix in ("Exception", "Error"):
        if name.endswith(suffix) and name != suffix:
            name = name[: -len(suffix)]
            break
    return _CAMEL_BOUNDARY.sub("_", name).upper()


def _normalize_details(owner: str, details: dict[str, Any] | ErrorDetail | None) -> dict[str, Any]:
    if details is None:
        return {}
    if isinstance(details, ErrorDetail):
        return details.model_dump(exclude_none=True)

    try:
        return ErrorDetail(**details).model_dump(exclude_none=True)
    except ValidationError as e:
        logger.exception(f"Invalid details in {owner}: {e}")
        msg = "Invalid details format"
        raise ValueError(msg) from e


class AppException(Exception):
    """Базовый класс для всех бизнес-ошибок.

    Attributes:
        status_code: HTTP статус ответа
        code: Машиночитаемый код (поле `error` ответа)
        retryable: Повтор того же запроса может пройти
        message: Сообщение для клиента
        details: Провалидированные детали

    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Внутренняя ошибка сервера"
    retryable: bool = False

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | ErrorDetail | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = _normalize_details(type(self).__name__, details)

        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

        super().__init__(self.message)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        if "code" not in cls.__dict__:
            cls.code = code_from_class_name(cls.__name__)

        if "default_message" not in cls.__dict__ and cls.__doc__:
            cls.default_message = cls.__doc__.strip().split("\n")[0]

    @property
    def is_server_error(self) -> bool:
        """Ошибка на нашей стороне или у провайдера (5xx)."""
        return self.status_code >= 500

    def log_fields(self) -> dict[str, Any]:
        """Поля для structured logging."""
        return {
            "error_code": self.code,
            "status_code": self.status_code,
            "error_message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }

    def to_response(self) -> ErrorResponse:
        """Тело HTTP ответа с текущим trace_id."""
        return ErrorResponse(
            error=self.code,
            message=self.message,
            details=self.details,
            trace_id=get_trace_id(),
        )

    @classmethod
    def openapi_response(cls) -> dict[str, Any]:
        """Описание ответа для `responses=` роутов."""
        return {
            "model": ErrorResponse,
            "description": f"{cls.code}: {cls.default_message}",
        }

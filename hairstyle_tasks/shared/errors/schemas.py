"""Error schemas.

Pydantic схемы для ошибок.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Детальная информация об ошибке.

    Поля верхнего уровня фиксированы, всё доменное уходит в `context`.
    """

    model_config = ConfigDict(extra="allow")

    field: str | None = Field(default=None, description="Поле с ошибкой")
    message: str | None = Field(default=None, description="Сообщение об ошибке")
    code: str | int | None = Field(default=None, description="Код ошибки")
    context: dict[str, Any] | None = Field(default=None, description="Дополнительный контекст")


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "INSUFFICIENT_CREDITS",
                "message": "Недостаточно кредитов",
                "details": {"required": 2, "balance": 1},
                "trace_id": "a1b2c3d4e5f64789901234567890abcd",
            }
        }
    )

    error: str = Field(..., description="Код ошибки")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: dict[str, Any] = Field(default_factory=dict, description="Дополнительные детали")
    trace_id: str = Field(default="", description="ID трассировки для отладки")

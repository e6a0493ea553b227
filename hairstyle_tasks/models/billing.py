"""Модели учёта кредитов."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from hairstyle_tasks.models.task import utcnow


class Receipt(BaseModel):
    """Запись об изменении баланса пользователя."""

    receipt_id: str = Field(default_factory=lambda: f"rcpt-{uuid.uuid4().hex[:16]}")
    user_id: str
    kind: Literal["debit", "grant"] = "debit"
    amount: int = Field(gt=0, description="Сколько кредитов списано или начислено")
    balance_after: int = Field(ge=0)
    note: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

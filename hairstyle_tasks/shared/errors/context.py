"""Error context management.

trace_id для корреляции логов и ответов с ошибками.
Устанавливается middleware'ом на входящий запрос и poller'ом на каждый проход.
"""

from contextvars import ContextVar
from uuid import uuid4

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """Получить текущий trace_id или сгенерировать новый.

    Returns:
        Строка trace_id.

    """
    trace_id = trace_id_var.get()
    if not trace_id:
        trace_id = new_trace_id()
    return trace_id


def set_trace_id(trace_id: str) -> None:
    """Установить trace_id в контекст.

    Args:
        trace_id: Идентификатор трассировки.

    """
    trace_id_var.set(trace_id)


def new_trace_id() -> str:
    """Сгенерировать и установить новый trace_id."""
    trace_id = uuid4().hex
    trace_id_var.set(trace_id)
    return trace_id

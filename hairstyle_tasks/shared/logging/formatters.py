"""Форматтеры логов для Loguru.

JSON формат для production и маскирование credentials в extra полях.
"""

from typing import Any

import orjson

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "api_key",
        "apikey",
        "secret",
        "token",
        "authorization",
        "access_token",
    }
)


def json_formatter(record: dict[str, Any]) -> str:
    """JSON форматтер для structured logging.

    Loguru вызывает formatter для каждой записи и ожидает шаблон,
    поэтому готовый JSON кладётся в extra и выводится через `{extra[serialized]}`.

    Args:
        record: Loguru record dictionary

    Returns:
        Шаблон строки для Loguru
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }

    for key, value in record["extra"].items():
        if key == "serialized":
            continue
        log_entry[key] = "***REDACTED***" if key.lower() in SENSITIVE_KEYS else value

    if record["exception"] is not None:
        exception_info = record["exception"]
        log_entry["exception"] = {
            "type": exception_info.type.__name__ if exception_info.type else None,
            "value": str(exception_info.value) if exception_info.value else None,
        }

    record["extra"]["serialized"] = orjson.dumps(log_entry, default=str).decode("utf-8")
    return "{extra[serialized]}\n"


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "trace_id=<yellow>{extra[trace_id]}</yellow> - "
    "<level>{message}</level>"
)

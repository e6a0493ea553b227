"""Helper функции для структурированного логирования.

Маскирование credentials перед логированием payload'ов провайдеров.
"""

from typing import Any

from hairstyle_tasks.shared.logging.formatters import SENSITIVE_KEYS


def sanitize_credentials(data: dict[str, Any]) -> dict[str, Any]:
    """Удалить credentials (пароли, API ключи) из словаря.

    Рекурсивно проходит по словарю и заменяет чувствительные поля на '***'.

    Args:
        data: Словарь с данными

    Returns:
        Новый словарь с замаскированными credentials

    Example:
        >>> sanitize_credentials({"user": "admin", "Authorization": "Bearer sk-1"})
        {'user': 'admin', 'Authorization': '***'}

    """
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS:
            sanitized[key] = "***"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_credentials(value)
        else:
            sanitized[key] = value
    return sanitized


def truncate(value: str, limit: int = 200) -> str:
    """Обрезать длинную строку (промпты) для логов."""
    if len(value) <= limit:
        return value
    return f"{value[:limit]}... ({len(value)} chars)"

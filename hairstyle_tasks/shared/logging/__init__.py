"""Модуль структурированного логирования.

Основное использование:
    >>> from hairstyle_tasks.shared.logging import setup_logging, get_logger
    >>> setup_logging(settings.log)  # Вызвать один раз при старте
    >>> logger = get_logger()
    >>> logger.info("Задача создана", task_no="...")  # trace_id добавится автоматически
"""

from hairstyle_tasks.shared.logging.config import (
    InterceptHandler,
    configure_third_party_loggers,
    get_logger,
    setup_logging,
)
from hairstyle_tasks.shared.logging.formatters import json_formatter
from hairstyle_tasks.shared.logging.helpers import sanitize_credentials, truncate

__all__ = [
    "InterceptHandler",
    "configure_third_party_loggers",
    "get_logger",
    "json_formatter",
    "sanitize_credentials",
    "setup_logging",
    "truncate",
]

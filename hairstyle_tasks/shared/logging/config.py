"""Logging configuration.

Настройка логирования через Loguru.
"""

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from hairstyle_tasks.core.config import LogSettings
from hairstyle_tasks.shared.errors.context import trace_id_var
from hairstyle_tasks.shared.logging.formatters import TEXT_FORMAT, json_formatter

if TYPE_CHECKING:
    from loguru import Logger


class InterceptHandler(logging.Handler):
    """Обработчик для перехвата логов стандартной библиотеки logging."""

    def emit(self, record: logging.LogRecord) -> None:
        """Перехват и отправка логов в Loguru.

        Args:
            record: Запись лога из стандартного logging.

        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level,
            record.getMessage(),
        )


def trace_id_patcher(record: Any) -> None:
    """Добавить trace_id в запись лога.

    Args:
        record: Запись лога.

    """
    record["extra"]["trace_id"] = trace_id_var.get() or "no-trace"


def setup_logging(log_settings: LogSettings, debug: bool = False) -> None:
    """Настроить логирование приложения.

    Args:
        log_settings: Секция настроек логирования.
        debug: Включить diagnose (значения переменных в traceback).

    """
    logger.remove()
    logger.configure(patcher=trace_id_patcher)

    if log_settings.format == "json":
        logger.add(
            sys.stdout,
            format=json_formatter,
            level=log_settings.level,
            colorize=False,
            backtrace=True,
            diagnose=debug,
        )
    else:
        logger.add(
            sys.stdout,
            format=TEXT_FORMAT,
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=debug,
        )

    if log_settings.file_path:
        log_path = Path(log_settings.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Файл всегда в JSON
        logger.add(
            log_settings.file_path,
            format=json_formatter,
            level=log_settings.level,
            rotation=log_settings.rotation,
            retention=log_settings.retention,
            compression="zip",
            backtrace=True,
            diagnose=debug,
            enqueue=True,
        )

    configure_third_party_loggers()

    logger.info(
        "Logger initialized",
        level=log_settings.level,
        format=log_settings.format,
        file=log_settings.file_path,
    )


def configure_third_party_loggers() -> None:
    """Перенаправить логи сторонних библиотек в Loguru."""
    loggers_to_intercept = [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "fastapi",
        "httpx",
        "redis",
    ]

    logging.getLogger("uvicorn.access").propagate = False

    for logger_name in loggers_to_intercept:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    # httpx логирует каждый запрос к провайдеру на INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> "Logger":
    """Получить настроенный logger instance.

    Args:
        name: Имя логгера (обычно __name__ модуля)

    Returns:
        Настроенный Loguru logger

    """
    if name:
        return logger.bind(name=name)
    return logger

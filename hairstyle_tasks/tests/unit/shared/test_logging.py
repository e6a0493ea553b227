"""Unit тесты для shared/logging."""

import logging
from datetime import datetime, timezone
from types import SimpleNamespace

import orjson
import pytest

from hairstyle_tasks.core.config import LogSettings
from hairstyle_tasks.shared.errors import set_trace_id
from hairstyle_tasks.shared.logging import get_logger, json_formatter, sanitize_credentials, setup_logging, truncate
from hairstyle_tasks.shared.logging.config import InterceptHandler, trace_id_patcher


class TestSetupLogging:
    """Тесты для setup_logging."""

    @pytest.mark.parametrize("log_format", ["text", "json"])
    def test_setup_without_file(self, log_format: str) -> None:
        setup_logging(LogSettings(format=log_format, file_path=None))

        get_logger("test").info("Test message", extra_field="value")

    def test_setup_with_file(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "app.log"

        setup_logging(LogSettings(file_path=str(log_file)))

        assert log_file.parent.is_dir()
        setup_logging(LogSettings(file_path=None))

    def test_third_party_loggers_intercepted(self) -> None:
        setup_logging(LogSettings(file_path=None))

        uvicorn_logger = logging.getLogger("uvicorn")
        assert any(isinstance(h, InterceptHandler) for h in uvicorn_logger.handlers)
        assert uvicorn_logger.propagate is False
        assert logging.getLogger("httpx").level == logging.WARNING


def test_trace_id_patcher() -> None:
    record: dict = {"extra": {}}

    set_trace_id("trace-1")
    trace_id_patcher(record)

    assert record["extra"]["trace_id"] == "trace-1"


def test_json_formatter_redacts_secrets() -> None:
    record = {
        "time": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "level": SimpleNamespace(name="INFO"),
        "name": "hairstyle_tasks.providers",
        "function": "submit",
        "line": 10,
        "message": "Отправка задачи",
        "extra": {"api_key": "sk-1", "task_no": "t-1"},
        "exception": None,
    }

    template = json_formatter(record)

    assert template == "{extra[serialized]}\n"
    entry = orjson.loads(record["extra"]["serialized"])
    assert entry["api_key"] == "***REDACTED***"
    assert entry["task_no"] == "t-1"
    assert entry["message"] == "Отправка задачи"


class TestHelpers:
    """Тесты helper функций."""

    def test_sanitize_credentials_nested(self) -> None:
        data = {"Authorization": "Bearer sk-1", "body": {"token": "x", "prompt": "p"}}

        assert sanitize_credentials(data) == {"Authorization": "***", "body": {"token": "***", "prompt": "p"}}

    def test_truncate(self) -> None:
        assert truncate("short") == "short"
        assert truncate("x" * 300, limit=10) == "xxxxxxxxxx... (300 chars)"

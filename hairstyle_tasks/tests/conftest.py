"""Общая конфигурация pytest."""

import os

# Тесты не пишут лог-файлы и не ходят во внешние сервисы
os.environ.setdefault("HAIR__LOG__FILE_PATH", "")
os.environ.setdefault("HAIR__ENVIRONMENT", "local")

"""Hairstyle Tasks - Configuration.

Конфигурация приложения через Pydantic Settings.
Каждый компонент получает свою секцию явно при создании,
глобальный `settings` используется только фабрикой приложения.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    """Настройки сервера (Uvicorn)."""

    host: str = Field(default="0.0.0.0", description="Хост")
    port: int = Field(default=8023, description="Порт")
    reload: bool = Field(default=False, description="Режим автоперезагрузки")

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        """Валидация порта.

        Args:
            value: Номер порта для проверки.

        Returns:
            Проверенное значение порта.

        Raises:
            ValueError: Если порт вне допустимого диапазона.

        """
        if not 1 <= value <= 65535:
            msg = f"Порт ({value}) должен быть в диапазоне 1-65535"
            raise ValueError(msg)
        return value


class RedisSettings(BaseModel):
    """Настройки Redis."""

    host: str = Field(default="localhost", description="Redis хост")
    port: int = Field(default=6379, description="Redis порт")
    db: int = Field(default=0, ge=0, le=15, description="Redis database index")
    password: str | None = Field(default=None, description="Redis пароль")

    @property
    def url(self) -> str:
        """URL для подключения к Redis.

        Returns:
            Строка подключения для Redis.

        """
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class KieSettings(BaseModel):
    """Настройки Kie AI (оба провайдера работают через один аккаунт)."""

    api_key: str = Field(default="", description="Bearer ключ Kie AI")
    base_url: str = Field(default="https://kieai.erweima.ai", description="Base URL API")
    timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP timeout")
    callback_base_url: str | None = Field(
        default=None,
        description="Публичный URL сервиса для webhook callbacks (None = без callback)",
    )

    @property
    def callback_url(self) -> str | None:
        """Полный URL webhook endpoint'а или None."""
        if not self.callback_base_url:
            return None
        return f"{self.callback_base_url.rstrip('/')}/webhooks/kie-image"


class StorageSettings(BaseModel):
    """Настройки object storage."""

    root_dir: str = Field(default="storage", description="Локальная директория bucket'а")
    cdn_url: str = Field(default="http://localhost:8023/static/", description="Публичный CDN URL")
    upload_prefix: str = Field(default="cache", description="Префикс для загрузок пользователей")
    result_prefix: str = Field(default="result/hairstyle", description="Префикс для результатов")
    mirror_results: bool = Field(default=True, description="Копировать результаты в свой storage")
    fetch_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout скачивания")


class TaskSettings(BaseModel):
    """Настройки lifecycle задач."""

    credits_per_style: int = Field(default=1, ge=1, description="Стоимость одного стиля")
    poller_enabled: bool = Field(default=False, description="Фоновый опрос активных задач")
    poller_interval_seconds: float = Field(default=5.0, gt=0, description="Интервал опроса")
    poller_batch_size: int = Field(default=20, ge=1, description="Задач за один проход")


class LogSettings(BaseModel):
    """Настройки логирования."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Уровень логирования",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description="Формат логов",
    )
    file_path: str | None = Field(
        default="logs/hairstyle-tasks.log",
        description="Путь к файлу логов (None = только stdout)",
    )
    rotation: str = Field(default="10 MB", description="Ротация логов")
    retention: str = Field(default="10 days", description="Время хранения логов")


class Settings(BaseSettings):
    """Главные настройки приложения.

    Все настройки загружаются из переменных окружения с префиксом HAIR__.
    Пример: HAIR__KIE__API_KEY=sk-...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_prefix="HAIR__",
        extra="ignore",
    )

    app_name: str = Field(default="Hairstyle Tasks", description="Название приложения")
    environment: Literal["local", "dev", "prod"] = Field(
        default="local",
        description="Окружение",
    )
    debug: bool = Field(default=False, description="Режим отладки")

    server: ServerSettings = Field(default_factory=ServerSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    kie: KieSettings = Field(default_factory=KieSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    tasks: TaskSettings = Field(default_factory=TaskSettings)
    log: LogSettings = Field(default_factory=LogSettings)


# Глобальный объект настроек (singleton)
settings = Settings()

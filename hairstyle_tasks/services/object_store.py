"""Object Store - хранение загрузок пользователей и копий результатов.

Ключи разделены по назначению:
    cache/<id>.<ext>                 -> фото пользователя
    result/hairstyle/<task_no>.png   -> копия результата провайдера
"""

import asyncio
import secrets
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import urljoin

import httpx
from pydantic import BaseModel

from hairstyle_tasks.core.config import StorageSettings
from hairstyle_tasks.shared.errors import UploadFailedError
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

RESULT_EXTENSION = "png"


class StoredObject(BaseModel):
    """Сохранённый объект."""

    key: str
    url: str
    size: int


class ObjectStore(Protocol):
    """Контракт object storage: положить байты по ключу, скачать по URL."""

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> StoredObject:
        """Сохранить байты под ключом."""
        ...

    async def fetch(self, url: str) -> bytes:
        """Скачать объект по URL (свой CDN или внешний)."""
        ...

    def public_url(self, key: str) -> str:
        """Публичный URL ключа."""
        ...

    async def aclose(self) -> None:
        """Освободить ресурсы."""
        ...


class LocalObjectStore:
    """Bucket в локальной директории, раздаётся через CDN URL."""

    def __init__(self, config: StorageSettings, client: httpx.AsyncClient | None = None) -> None:
        """Инициализировать storage.

        Args:
            config: Настройки storage
            client: httpx клиент для fetch (для тестов)

        """
        self.config = config
        self.root = Path(config.root_dir)
        self.client = client or httpx.AsyncClient(
            timeout=config.fetch_timeout_seconds,
            follow_redirects=True,
        )

    def _path(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts:
            msg = f"Недопустимый ключ объекта: {key}"
            raise ValueError(msg)
        return self.root.joinpath(*relative.parts)

    def public_url(self, key: str) -> str:
        return urljoin(self.config.cdn_url.rstrip("/") + "/", key)

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> StoredObject:
        path = self._path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.debug("Объект сохранён", key=key, size=len(data), content_type=content_type)
        return StoredObject(key=key, url=self.public_url(key), size=len(data))

    async def fetch(self, url: str) -> bytes:
        response = await self.client.get(url)
        response.raise_for_status()
        return response.content

    async def aclose(self) -> None:
        """Закрыть HTTP клиент."""
        await self.client.aclose()


class InMemoryObjectStore:
    """Storage в памяти процесса (тесты).

    Attributes:
        objects: Сохранённые объекты по ключу
        remote: Ответы fetch для внешних URL

    """

    def __init__(self, cdn_url: str = "https://cdn.test/", remote: dict[str, bytes] | None = None) -> None:
        self.cdn_url = cdn_url
        self.objects: dict[str, bytes] = {}
        self.remote: dict[str, bytes] = dict(remote or {})

    def public_url(self, key: str) -> str:
        return urljoin(self.cdn_url, key)

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> StoredObject:
        self.objects[key] = data
        return StoredObject(key=key, url=self.public_url(key), size=len(data))

    async def fetch(self, url: str) -> bytes:
        if url in self.remote:
            return self.remote[url]
        for key, data in self.objects.items():
            if self.public_url(key) == url:
                return data
        msg = f"Объект не найден: {url}"
        raise FileNotFoundError(msg)

    async def aclose(self) -> None:
        return None


def upload_key(prefix: str, filename: str) -> str:
    """Сгенерировать уникальный ключ загрузки с расширением исходного файла."""
    suffix = PurePosixPath(filename).suffix.lower()
    return f"{prefix.strip('/')}/{secrets.token_urlsafe(16)}{suffix}"


async def upload_photo(
    store: ObjectStore,
    data: bytes,
    filename: str,
    prefix: str = "cache",
    content_type: str | None = None,
) -> StoredObject:
    """Загрузить фото пользователя.

    Raises:
        UploadFailedError: Storage не принял файл

    """
    key = upload_key(prefix, filename)
    try:
        return await store.put(key, data, content_type)
    except Exception as e:
        logger.exception("Не удалось загрузить фото", key=key, error=str(e))
        raise UploadFailedError(details={"context": {"key": key, "error": str(e)}}) from e


async def mirror_result(
    store: ObjectStore,
    url: str,
    task_no: str,
    prefix: str = "result/hairstyle",
) -> str | None:
    """Скопировать результат провайдера в свой storage.

    Best-effort: любая ошибка логируется и даёт None, вызывающий
    оставляет исходный URL провайдера.

    Returns:
        URL копии или None

    """
    key = f"{prefix.strip('/')}/{task_no}.{RESULT_EXTENSION}"
    try:
        data = await store.fetch(url)
        if not data:
            logger.warning("Пустой результат, копия не создана", task_no=task_no, url=url)
            return None
        stored = await store.put(key, data, f"image/{RESULT_EXTENSION}")
    except Exception as e:
        logger.warning("Не удалось скопировать результат", task_no=task_no, url=url, error=str(e))
        return None

    return stored.url

"""Unit тесты для services/object_store.py."""

from pathlib import Path

import httpx
import pytest

from hairstyle_tasks.core.config import StorageSettings
from hairstyle_tasks.services import InMemoryObjectStore, LocalObjectStore, mirror_result, upload_photo
from hairstyle_tasks.services.object_store import upload_key
from hairstyle_tasks.shared.errors import UploadFailedError
from hairstyle_tasks.tests.unit.factories import FailingObjectStore

REMOTE_URL = "https://tempfile.kie.test/abc.png"


class TestUploadPhoto:
    """Тесты загрузки фото пользователя."""

    def test_upload_key_keeps_extension(self) -> None:
        key = upload_key("cache", "Selfie.JPG")

        assert key.startswith("cache/")
        assert key.endswith(".jpg")

    @pytest.mark.asyncio
    async def test_upload(self) -> None:
        store = InMemoryObjectStore(cdn_url="https://cdn.test/")

        stored = await upload_photo(store, b"bytes", "me.png")

        assert stored.url == f"https://cdn.test/{stored.key}"
        assert store.objects[stored.key] == b"bytes"
        assert stored.size == 5

    @pytest.mark.asyncio
    async def test_upload_failure(self) -> None:
        with pytest.raises(UploadFailedError) as exc_info:
            await upload_photo(FailingObjectStore(), b"bytes", "me.png")

        assert exc_info.value.status_code == 502


class TestMirrorResult:
    """Best-effort копирование результата."""

    @pytest.mark.asyncio
    async def test_mirror(self) -> None:
        store = InMemoryObjectStore(cdn_url="https://cdn.test/", remote={REMOTE_URL: b"img"})

        url = await mirror_result(store, REMOTE_URL, "task-1")

        assert url == "https://cdn.test/result/hairstyle/task-1.png"
        assert store.objects["result/hairstyle/task-1.png"] == b"img"

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_none(self) -> None:
        store = InMemoryObjectStore()

        assert await mirror_result(store, REMOTE_URL, "task-1") is None

    @pytest.mark.asyncio
    async def test_put_failure_returns_none(self) -> None:
        store = FailingObjectStore(remote={REMOTE_URL: b"img"})

        assert await mirror_result(store, REMOTE_URL, "task-1") is None

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self) -> None:
        store = InMemoryObjectStore(remote={REMOTE_URL: b""})

        assert await mirror_result(store, REMOTE_URL, "task-1") is None
        assert store.objects == {}


class TestLocalObjectStore:
    """Тесты LocalObjectStore на временной директории."""

    @pytest.fixture
    def settings(self, tmp_path: Path) -> StorageSettings:
        return StorageSettings(root_dir=str(tmp_path), cdn_url="https://cdn.test/static")

    @pytest.mark.asyncio
    async def test_put_writes_file(self, settings: StorageSettings, tmp_path: Path) -> None:
        store = LocalObjectStore(settings)

        stored = await store.put("cache/a.png", b"data")

        assert (tmp_path / "cache" / "a.png").read_bytes() == b"data"
        assert stored.url == "https://cdn.test/static/cache/a.png"
        await store.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["../escape.png", "/etc/passwd"])
    async def test_rejects_unsafe_keys(self, settings: StorageSettings, key: str) -> None:
        store = LocalObjectStore(settings)

        with pytest.raises(ValueError):
            await store.put(key, b"data")
        await store.aclose()

    @pytest.mark.asyncio
    async def test_fetch(self, settings: StorageSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == REMOTE_URL:
                return httpx.Response(200, content=b"remote-bytes")
            return httpx.Response(404)

        store = LocalObjectStore(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        assert await store.fetch(REMOTE_URL) == b"remote-bytes"
        with pytest.raises(httpx.HTTPStatusError):
            await store.fetch("https://tempfile.kie.test/missing.png")
        await store.aclose()

    @pytest.mark.asyncio
    async def test_mirror_through_local_store(self, settings: StorageSettings, tmp_path: Path) -> None:
        """mirror_result: скачать по URL и положить в bucket."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"png"))
        store = LocalObjectStore(settings, client=httpx.AsyncClient(transport=transport))

        url = await mirror_result(store, REMOTE_URL, "t-9", prefix=settings.result_prefix)

        assert url == "https://cdn.test/static/result/hairstyle/t-9.png"
        assert (tmp_path / "result" / "hairstyle" / "t-9.png").read_bytes() == b"png"
        await store.aclose()

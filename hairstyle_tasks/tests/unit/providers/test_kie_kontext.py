"""Unit тесты для providers/kie_kontext.py."""

import httpx
import pytest

from hairstyle_tasks.core.config import KieSettings
from hairstyle_tasks.models import HairColorOption, HairstyleOption
from hairstyle_tasks.providers import Failure, InProgress, KieClient, KieKontextProvider, Success


def make_provider(handler=None, callback_url: str | None = None) -> KieKontextProvider:
    transport = httpx.MockTransport(handler or (lambda r: httpx.Response(500)))
    http = httpx.AsyncClient(base_url="https://kie.test", transport=transport)
    return KieKontextProvider(KieClient(KieSettings(api_key="k"), client=http), callback_url=callback_url)


def record(data: dict) -> httpx.Response:
    return httpx.Response(200, json={"code": 200, "msg": "success", "data": data})


class TestKieKontextProvider:
    """Тесты Flux Kontext провайдера."""

    def test_build_request(self) -> None:
        provider = make_provider(callback_url="https://hair.test/webhooks/kie-image")
        style = HairstyleOption(name="Bob", value="bob", cover="https://cdn.test/bob.png")

        payload = provider.build_request(
            "https://cdn.test/cache/me.png",
            style,
            HairColorOption(name="Blonde", value="#FAF0BE"),
            "add bangs",
        )

        assert payload["inputImage"] == "https://cdn.test/cache/me.png"
        assert payload["aspectRatio"] == "3:4"
        assert payload["model"] == "flux-kontext-pro"
        assert payload["outputFormat"] == "png"
        assert payload["callBackUrl"] == "https://hair.test/webhooks/kie-image"
        assert payload["prompt"].startswith("Change the current hairstyle to a Bob with Blonde hair color.")
        assert payload["prompt"].endswith("Other ideas about how to edit my image: add bangs")
        # Референсы Kontext не поддерживает
        assert "bob.png" not in str(payload)

    @pytest.mark.asyncio
    async def test_submit(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return record({"taskId": "ktx-1"})

        assert await make_provider(handler).submit({"prompt": "p"}) == "ktx-1"
        assert seen[0].url.path == "/api/v1/flux/kontext/generate"

    @pytest.mark.asyncio
    async def test_poll_generating_reports_zero(self) -> None:
        """Kontext не отдаёт прогресс: пока генерируется - 0."""
        status = await make_provider(lambda r: record({"successFlag": 0})).poll("ktx-1")

        assert isinstance(status, InProgress)
        assert status.progress == 0

    @pytest.mark.asyncio
    async def test_poll_success_prefers_result_image(self) -> None:
        data = {
            "successFlag": 1,
            "response": {
                "resultImageUrl": "https://tempfile.kie.test/result.png",
                "originImageUrl": "https://tempfile.kie.test/origin.png",
            },
        }

        status = await make_provider(lambda r: record(data)).poll("ktx-1")

        assert isinstance(status, Success)
        assert status.result_url == "https://tempfile.kie.test/result.png"

    @pytest.mark.asyncio
    async def test_poll_success_falls_back_to_origin(self) -> None:
        data = {"successFlag": 1, "response": {"originImageUrl": "https://tempfile.kie.test/origin.png"}}

        status = await make_provider(lambda r: record(data)).poll("ktx-1")

        assert status.result_url == "https://tempfile.kie.test/origin.png"

    @pytest.mark.asyncio
    async def test_poll_empty_result_does_not_fall_back(self) -> None:
        """Пустой resultImageUrl - результата нет, исходное фото не подставляется."""
        data = {
            "successFlag": 1,
            "response": {"resultImageUrl": "", "originImageUrl": "https://tempfile.kie.test/origin.png"},
        }

        status = await make_provider(lambda r: record(data)).poll("ktx-1")

        assert isinstance(status, Success)
        assert status.result_url is None

    @pytest.mark.asyncio
    async def test_poll_success_without_urls(self) -> None:
        status = await make_provider(lambda r: record({"successFlag": 1, "response": None})).poll("ktx-1")

        assert isinstance(status, Success)
        assert status.result_url is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", [2, 3])
    async def test_poll_failure(self, flag: int) -> None:
        status = await make_provider(lambda r: record({"successFlag": flag, "errorMessage": "NSFW"})).poll("ktx-1")

        assert isinstance(status, Failure)
        assert status.message == "NSFW"

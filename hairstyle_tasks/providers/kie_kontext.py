"""Flux Kontext Provider (Kie AI).

record-info отдаёт только successFlag: 0 - генерируется, 1 - успех, 2/3 - ошибка.
Численного прогресса нет, пока задача идёт прогресс всегда 0.
"""

from typing import Any

from hairstyle_tasks.core.enums import ProviderKind
from hairstyle_tasks.models.task import HairColorOption, HairstyleOption
from hairstyle_tasks.prompts import build_kontext_prompt
from hairstyle_tasks.providers.base import Failure, InProgress, Success
from hairstyle_tasks.providers.kie_client import KieClient
from hairstyle_tasks.shared.errors import ProviderError
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

GENERATE_PATH = "/api/v1/flux/kontext/generate"
RECORD_INFO_PATH = "/api/v1/flux/kontext/record-info"

FLAG_GENERATING = 0
FLAG_SUCCESS = 1

KONTEXT_MODEL = "flux-kontext-pro"
OUTPUT_FORMAT = "png"


class KieKontextProvider:
    """Provider для Flux Kontext."""

    kind = ProviderKind.KIE_KONTEXT

    def __init__(
        self,
        client: KieClient,
        callback_url: str | None = None,
        owns_client: bool = True,
    ) -> None:
        self.client = client
        self.callback_url = callback_url
        self.owns_client = owns_client

    @property
    def aspect(self) -> str:
        """Соотношение сторон результата."""
        return self.kind.aspect

    def build_request(
        self,
        photo_url: str,
        hairstyle: HairstyleOption,
        hair_color: HairColorOption,
        detail: str | None = None,
    ) -> dict[str, Any]:
        """Собрать payload generate запроса (референсы не передаются)."""
        payload: dict[str, Any] = {
            "inputImage": photo_url,
            "prompt": build_kontext_prompt(
                hairstyle=hairstyle.name,
                haircolor=hair_color.name or None,
                detail=detail,
            ),
            "aspectRatio": self.aspect,
            "model": KONTEXT_MODEL,
            "outputFormat": OUTPUT_FORMAT,
        }
        if self.callback_url:
            payload["callBackUrl"] = self.callback_url
        return payload

    async def submit(self, request_param: dict[str, Any]) -> str:
        """Создать задачу генерации."""
        data = await self.client.post(GENERATE_PATH, request_param)
        task_id = data.get("taskId") if isinstance(data, dict) else None
        if not task_id:
            raise ProviderError("no_task_id", "Provider did not return taskId", data=data)

        logger.debug("Задача Kontext создана", provider_task_id=task_id)
        return str(task_id)

    async def poll(self, provider_task_id: str) -> InProgress | Success | Failure:
        """Запросить статус и привести к ProviderStatus."""
        data = await self.client.get(RECORD_INFO_PATH, {"taskId": provider_task_id})
        if not isinstance(data, dict):
            raise ProviderError("empty_record", "Provider returned empty record", data=data)

        flag = data.get("successFlag")

        if flag == FLAG_GENERATING:
            return InProgress(progress=0.0)

        if flag == FLAG_SUCCESS:
            response = data.get("response") or {}
            # originImageUrl только при отсутствии поля resultImageUrl
            url = response.get("resultImageUrl")
            if url is None:
                url = response.get("originImageUrl")
            return Success(result_url=url or None, raw=data)

        return Failure(message=data.get("errorMessage") or f"Generation failed: flag {flag}", raw=data)

    async def aclose(self) -> None:
        """Закрыть HTTP клиент, если provider им владеет."""
        if self.owns_client:
            await self.client.aclose()

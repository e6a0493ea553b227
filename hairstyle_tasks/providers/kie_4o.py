"""GPT-4o Image Provider (Kie AI).

Статусы record-info: GENERATING | SUCCESS | CREATE_TASK_FAILED | GENERATE_FAILED.
Прогресс приходит строкой ("0.42" или "42"), нормализуется в доли [0, 1].
"""

from typing import Any

from hairstyle_tasks.core.enums import ProviderKind
from hairstyle_tasks.models.task import HairColorOption, HairstyleOption
from hairstyle_tasks.prompts import attachment_urls, build_4o_prompt
from hairstyle_tasks.providers.base import Failure, InProgress, Success
from hairstyle_tasks.providers.kie_client import KieClient
from hairstyle_tasks.shared.errors import ProviderError
from hairstyle_tasks.shared.logging import get_logger, truncate

logger = get_logger()

GENERATE_PATH = "/api/v1/gpt4o-image/generate"
RECORD_INFO_PATH = "/api/v1/gpt4o-image/record-info"

STATUS_GENERATING = "GENERATING"
STATUS_SUCCESS = "SUCCESS"


def parse_progress(value: Any) -> float:
    """Привести прогресс провайдера к доле [0, 1].

    Значения больше 1 считаются процентами. Нечисловые значения дают 0.

    Example:
        >>> parse_progress("42")
        0.42
        >>> parse_progress("0.5")
        0.5

    """
    try:
        progress = float(value)
    except (TypeError, ValueError):
        return 0.0

    if progress != progress:  # NaN
        return 0.0
    if progress > 1:
        progress /= 100
    return round(min(max(progress, 0.0), 1.0), 4)


class Kie4oProvider:
    """Provider для GPT-4o Image.

    Поддерживает референсы причёски и цвета как дополнительные вложения.
    """

    kind = ProviderKind.KIE_4O

    def __init__(
        self,
        client: KieClient,
        callback_url: str | None = None,
        owns_client: bool = True,
    ) -> None:
        """Инициализировать provider.

        Args:
            client: Kie AI клиент
            callback_url: URL webhook'а (None = только polling)
            owns_client: Закрывать клиент в aclose (False для общего клиента)

        """
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
        """Собрать payload generate запроса."""
        prompt = build_4o_prompt(
            hairstyle=hairstyle.name,
            haircolor=hair_color.name or None,
            haircolor_hex=hair_color.value or None,
            with_style_reference=bool(hairstyle.cover),
            with_color_reference=bool(hair_color.cover),
            detail=detail,
        )

        payload: dict[str, Any] = {
            "filesUrl": attachment_urls(photo_url, hairstyle.cover, hair_color.cover),
            "prompt": prompt,
            "size": self.aspect,
            "nVariants": "1",
        }
        if self.callback_url:
            payload["callBackUrl"] = self.callback_url
        return payload

    async def submit(self, request_param: dict[str, Any]) -> str:
        """Создать задачу генерации."""
        logger.debug(
            "Отправка задачи GPT-4o",
            files=len(request_param.get("filesUrl", [])),
            prompt=truncate(str(request_param.get("prompt", ""))),
        )

        data = await self.client.post(GENERATE_PATH, request_param)
        task_id = data.get("taskId") if isinstance(data, dict) else None
        if not task_id:
            raise ProviderError("no_task_id", "Provider did not return taskId", data=data)

        return str(task_id)

    async def poll(self, provider_task_id: str) -> InProgress | Success | Failure:
        """Запросить статус и привести к ProviderStatus."""
        data = await self.client.get(RECORD_INFO_PATH, {"taskId": provider_task_id})
        if not isinstance(data, dict):
            raise ProviderError("empty_record", "Provider returned empty record", data=data)

        status = data.get("status")

        if status == STATUS_GENERATING:
            return InProgress(progress=parse_progress(data.get("progress")))

        if status == STATUS_SUCCESS:
            response = data.get("response") or {}
            urls = response.get("resultUrls") or []
            return Success(result_url=urls[0] if urls else None, raw=data)

        return Failure(message=data.get("errorMessage") or f"Generation failed: {status}", raw=data)

    async def aclose(self) -> None:
        """Закрыть HTTP клиент, если provider им владеет."""
        if self.owns_client:
            await self.client.aclose()

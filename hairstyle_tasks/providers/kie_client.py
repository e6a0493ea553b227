"""HTTP клиент Kie AI.

Общий транспорт для GPT-4o и Kontext провайдеров:
- Bearer авторизация на каждом запросе
- GET параметры в query string, остальные методы - JSON body
- Envelope {code, msg, data}: code != 200 считается ошибкой даже при HTTP 200
"""

from typing import Any

import httpx

from hairstyle_tasks.core.config import KieSettings
from hairstyle_tasks.shared.errors import ProviderError
from hairstyle_tasks.shared.logging import get_logger, sanitize_credentials

logger = get_logger()

ENVELOPE_SUCCESS_CODE = 200
CREDIT_PATH = "/api/v1/chat/credit"


class KieClient:
    """Async клиент Kie AI API.

    Attributes:
        config: Секция настроек Kie
        client: httpx.AsyncClient (можно передать свой, например с MockTransport)

    """

    def __init__(self, config: KieSettings, client: httpx.AsyncClient | None = None) -> None:
        """Инициализировать клиент.

        Args:
            config: Настройки Kie (ключ, base URL, timeout)
            client: Готовый httpx клиент (для тестов)

        """
        self.config = config
        self.client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

        logger.info("KieClient инициализирован", base_url=config.base_url)

    @property
    def headers(self) -> dict[str, str]:
        """Заголовки каждого запроса."""
        return {
            "content-type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

    async def request(
        self,
        method: str,
        path: str,
        data: dict[str, Any] | None = None,
    ) -> Any:
        """Выполнить запрос и вернуть `data` из envelope.

        Args:
            method: HTTP метод
            path: Путь относительно base_url
            data: Query параметры (GET) или JSON body

        Returns:
            Поле `data` ответа

        Raises:
            ProviderError: Транспортная ошибка, HTTP не 2xx или code != 200

        """
        method = method.upper()
        logger.debug("Kie AI запрос", method=method, path=path, headers=sanitize_credentials(self.headers))

        try:
            if method == "GET":
                response = await self.client.request(method, path, params=data, headers=self.headers)
            else:
                response = await self.client.request(method, path, json=data, headers=self.headers)
        except httpx.HTTPError as e:
            logger.warning("Kie AI недоступен", method=method, path=path, error=str(e))
            raise ProviderError("network", str(e) or type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            raise ProviderError(
                response.status_code,
                response.reason_phrase or "Invalid response body",
                data=response.text,
            )

        code = payload.get("code", response.status_code)
        if not response.is_success or code != ENVELOPE_SUCCESS_CODE:
            logger.warning(
                "Kie AI вернул ошибку",
                method=method,
                path=path,
                status_code=response.status_code,
                code=code,
                msg=payload.get("msg"),
            )
            raise ProviderError(
                code if code is not None else response.status_code,
                payload.get("msg") or response.reason_phrase,
                data=payload.get("data"),
            )

        return payload.get("data")

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET запрос с query параметрами."""
        return await self.request("GET", path, params)

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """POST запрос с JSON body."""
        return await self.request("POST", path, body)

    async def get_account_credits(self) -> int:
        """Остаток кредитов аккаунта Kie AI."""
        return int(await self.get(CREDIT_PATH))

    async def aclose(self) -> None:
        """Закрыть HTTP соединения."""
        await self.client.aclose()

"""Тесты HTTP API."""

import httpx
import orjson
import pytest

from hairstyle_tasks.core.enums import TaskStatus
from hairstyle_tasks.providers import Success
from hairstyle_tasks.services import InMemoryCreditLedger, InMemoryTaskStore
from hairstyle_tasks.tests.unit.factories import USER_ID, FakeProvider, make_task

HEADERS = {"X-User-Id": USER_ID}
PHOTO = {"photo": ("me.png", b"\x89PNG fake", "image/png")}


def form(styles: list[str], **extra: str) -> dict[str, str]:
    data = {"hairstyle": orjson.dumps([{"name": s, "value": s.lower()} for s in styles]).decode()}
    data.update(extra)
    return data


class TestCreateTasks:
    """POST /api/v1/tasks."""

    @pytest.mark.asyncio
    async def test_create_batch(self, client: httpx.AsyncClient, ledger: InMemoryCreditLedger) -> None:
        response = await client.post(
            "/api/v1/tasks",
            headers=HEADERS,
            files=PHOTO,
            data=form(["Bob", "Pixie"], hair_color='{"name": "Copper", "value": "#B87333"}'),
        )

        assert response.status_code == 201
        body = response.json()
        assert [t["status"] for t in body["tasks"]] == ["pending", "pending"]
        assert body["tasks"][0]["aspect"] == "2:3"
        assert body["tasks"][0]["ext"] == {"hairstyle": "Bob", "haircolor": "Copper"}
        assert body["consumed_credits"]["amount"] == 2
        assert await ledger.balance(USER_ID) == 8
        assert response.headers["X-Trace-Id"]

    @pytest.mark.asyncio
    async def test_create_kontext_batch(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/v1/tasks",
            headers=HEADERS,
            files=PHOTO,
            data=form(["Bob"], type="kontext"),
        )

        assert response.status_code == 201
        assert response.json()["tasks"][0]["aspect"] == "3:4"

    @pytest.mark.asyncio
    async def test_requires_user(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/v1/tasks", files=PHOTO, data=form(["Bob"]))

        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_insufficient_credits(self, client: httpx.AsyncClient, task_store: InMemoryTaskStore) -> None:
        response = await client.post(
            "/api/v1/tasks",
            headers={"X-User-Id": "poor-user"},
            files=PHOTO,
            data=form(["Bob"]),
        )

        assert response.status_code == 402
        body = response.json()
        assert body["error"] == "INSUFFICIENT_CREDITS"
        assert body["details"] == {"required": 1, "balance": 0}
        assert response.headers["X-Error-Code"] == "INSUFFICIENT_CREDITS"
        assert task_store.write_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            {"hairstyle": "not json"},
            {"hairstyle": "[]"},
            {"hairstyle": '[{"name": "Bob", "value": "bob"}]', "type": "dall-e"},
        ],
    )
    async def test_invalid_form(self, client: httpx.AsyncClient, ledger: InMemoryCreditLedger, data) -> None:
        response = await client.post("/api/v1/tasks", headers=HEADERS, files=PHOTO, data=data)

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert await ledger.balance(USER_ID) == 10

    @pytest.mark.asyncio
    async def test_missing_photo(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/v1/tasks", headers=HEADERS, data=form(["Bob"]))

        assert response.status_code == 422


class TestTaskStatus:
    """GET /api/task/{task_no}."""

    @pytest.mark.asyncio
    async def test_pending_task_is_dispatched(
        self,
        client: httpx.AsyncClient,
        task_store: InMemoryTaskStore,
        provider_4o: FakeProvider,
    ) -> None:
        task = make_task()
        await task_store.insert_batch([task])

        response = await client.get(f"/api/task/{task.task_no}")

        assert response.status_code == 200
        body = response.json()
        assert body["task"]["status"] == "running"
        assert body["task"]["provider_task_id"] == "kie_4o-1"
        assert body["progress"] == 0
        assert len(provider_4o.submitted) == 1

    @pytest.mark.asyncio
    async def test_succeeded_task(
        self,
        client: httpx.AsyncClient,
        task_store: InMemoryTaskStore,
        provider_4o: FakeProvider,
    ) -> None:
        task = make_task(TaskStatus.RUNNING)
        await task_store.insert_batch([task])
        provider_4o.statuses["kie_4o-existing"] = Success(result_url="https://tempfile.kie.test/r.png")

        response = await client.get(f"/api/task/{task.task_no}")

        body = response.json()
        assert body["task"]["status"] == "succeeded"
        assert body["task"]["result_url"] == "https://tempfile.kie.test/r.png"
        assert body["progress"] == 1

    @pytest.mark.asyncio
    async def test_unknown_task(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/task/missing")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "INVALID_REFERENCE"
        assert body["details"]["reference"] == "missing"

    @pytest.mark.asyncio
    async def test_corrupted_running_task(self, client: httpx.AsyncClient, task_store: InMemoryTaskStore) -> None:
        task = make_task(TaskStatus.RUNNING, provider_task_id=None)
        await task_store.insert_batch([task])

        response = await client.get(f"/api/task/{task.task_no}")

        assert response.status_code == 500
        assert response.json()["error"] == "TASK_STATE_CORRUPTED"


class TestListTasks:
    """GET /api/v1/tasks."""

    @pytest.mark.asyncio
    async def test_list(self, client: httpx.AsyncClient, task_store: InMemoryTaskStore) -> None:
        mine = make_task()
        await task_store.insert_batch([mine, make_task(user_id="other")])

        response = await client.get("/api/v1/tasks", headers=HEADERS)

        assert response.status_code == 200
        assert [t["task_no"] for t in response.json()["tasks"]] == [mine.task_no]

    @pytest.mark.asyncio
    async def test_limit_validated(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/tasks", headers=HEADERS, params={"limit": 0})

        assert response.status_code == 422


class TestWebhook:
    """POST /webhooks/kie-image всегда отвечает 200 {}."""

    @pytest.mark.asyncio
    async def test_webhook_completes_task(
        self,
        client: httpx.AsyncClient,
        task_store: InMemoryTaskStore,
        provider_4o: FakeProvider,
    ) -> None:
        task = make_task(TaskStatus.RUNNING)
        await task_store.insert_batch([task])
        provider_4o.statuses["kie_4o-existing"] = Success(result_url="https://tempfile.kie.test/r.png")

        response = await client.post(
            "/webhooks/kie-image",
            json={"code": 200, "msg": "success", "data": {"taskId": "kie_4o-existing", "info": {}}},
        )

        assert response.status_code == 200
        assert response.json() == {}
        assert (await task_store.get(task.task_no)).status is TaskStatus.SUCCEEDED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            b"not json",
            b"[1, 2]",
            b'{"code": 200, "data": {}}',
            b'{"code": 200, "data": {"taskId": "unknown"}}',
        ],
    )
    async def test_webhook_ignores_bad_payloads(
        self,
        client: httpx.AsyncClient,
        task_store: InMemoryTaskStore,
        content: bytes,
    ) -> None:
        response = await client.post(
            "/webhooks/kie-image",
            content=content,
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {}
        assert task_store.write_count == 0

    @pytest.mark.asyncio
    async def test_webhook_for_finished_task(
        self,
        client: httpx.AsyncClient,
        task_store: InMemoryTaskStore,
        provider_4o: FakeProvider,
    ) -> None:
        """Повторный callback по завершённой задаче ничего не меняет."""
        task = make_task(TaskStatus.SUCCEEDED, result_url="https://cdn.test/r.png")
        await task_store.insert_batch([task])
        writes = task_store.write_count

        response = await client.post("/webhooks/kie-image", json={"data": {"taskId": "kie_4o-existing"}})

        assert response.json() == {}
        assert task_store.write_count == writes
        assert provider_4o.polled == []


class TestServiceRoutes:
    """Health и баланс."""

    @pytest.mark.asyncio
    async def test_health(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["redis"] is True

    @pytest.mark.asyncio
    async def test_credits(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/credits", headers=HEADERS)

        assert response.json() == {"user_id": USER_ID, "balance": 10}

    @pytest.mark.asyncio
    async def test_credits_requires_user(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/credits")

        assert response.status_code == 401

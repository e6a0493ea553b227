"""Task Store - durable хранилище задач.

Redis Schema:
    task:{task_no}                     -> Hash (плоские поля Task)
    task:provider:{provider_task_id}   -> String (task_no, обратный индекс для webhooks)
    tasks:user:{user_id}               -> Sorted Set (task_no, score = created_at)
    tasks:active                       -> Set (pending/running task_no)

Все изменения задач идут через compare_and_set: поля применяются только если
текущий статус равен ожидаемому. Проигравший в гонке получает None.
"""

import asyncio
from typing import Any, Protocol

from redis.asyncio import Redis
from redis.exceptions import WatchError

from hairstyle_tasks.core.enums import TaskStatus
from hairstyle_tasks.models.task import Task, encode_fields
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

ACTIVE_KEY = "tasks:active"


class TaskStore(Protocol):
    """Контракт хранилища задач."""

    async def insert_batch(self, tasks: list[Task]) -> None:
        """Сохранить пакет новых задач одной операцией."""
        ...

    async def get(self, task_no: str) -> Task | None:
        """Найти задачу по номеру."""
        ...

    async def get_by_provider_task_id(self, provider_task_id: str) -> Task | None:
        """Найти задачу по ID провайдера."""
        ...

    async def compare_and_set(
        self,
        task_no: str,
        expected_status: TaskStatus,
        fields: dict[str, Any],
    ) -> Task | None:
        """Атомарно обновить поля, если статус равен expected_status.

        Returns:
            Обновлённая задача или None если статус уже другой

        """
        ...

    async def list_by_user(self, user_id: str, limit: int = 50) -> list[Task]:
        """Задачи пользователя, новые первыми."""
        ...

    async def list_active(self, limit: int = 100) -> list[str]:
        """Номера pending/running задач."""
        ...


def check_transition(task_no: str, expected_status: TaskStatus, fields: dict[str, Any]) -> None:
    """Разрешены только переходы вперёд по state machine.

    Raises:
        ValueError: Запрещённый переход или попытка сменить неизменяемое поле

    """
    if "task_no" in fields or "provider" in fields:
        msg = f"Нельзя менять task_no/provider задачи '{task_no}'"
        raise ValueError(msg)

    target = fields.get("status")
    if target is not None and not expected_status.can_transition_to(TaskStatus(target)):
        msg = f"Запрещённый переход {expected_status.value} -> {TaskStatus(target).value} для '{task_no}'"
        raise ValueError(msg)


def _decode(data: dict[bytes, bytes]) -> dict[str, str]:
    return {k.decode("utf-8"): v.decode("utf-8") for k, v in data.items()}


class RedisTaskStore:
    """Task store на Redis."""

    def __init__(self, redis_client: Redis) -> None:
        """Инициализировать store.

        Args:
            redis_client: Async Redis client (decode_responses=False)

        """
        self.redis = redis_client

    @staticmethod
    def _task_key(task_no: str) -> str:
        return f"task:{task_no}"

    @staticmethod
    def _provider_key(provider_task_id: str) -> str:
        return f"task:provider:{provider_task_id}"

    @staticmethod
    def _user_key(user_id: str) -> str:
        return f"tasks:user:{user_id}"

    async def insert_batch(self, tasks: list[Task]) -> None:
        """Сохранить пакет в одной MULTI транзакции."""
        if not tasks:
            return

        async with self.redis.pipeline(transaction=True) as pipe:
            for task in tasks:
                pipe.hset(self._task_key(task.task_no), mapping=task.to_record())
                pipe.zadd(self._user_key(task.user_id), {task.task_no: task.created_at.timestamp()})
                if task.provider_task_id:
                    pipe.set(self._provider_key(task.provider_task_id), task.task_no)
                if not task.status.is_terminal:
                    pipe.sadd(ACTIVE_KEY, task.task_no)
            await pipe.execute()

        logger.info("Пакет задач сохранён", count=len(tasks), task_nos=[t.task_no for t in tasks])

    async def get(self, task_no: str) -> Task | None:
        data = await self.redis.hgetall(self._task_key(task_no))
        if not data:
            return None
        return Task.from_record(_decode(data))

    async def get_by_provider_task_id(self, provider_task_id: str) -> Task | None:
        task_no = await self.redis.get(self._provider_key(provider_task_id))
        if not task_no:
            return None
        return await self.get(task_no.decode("utf-8"))

    async def compare_and_set(
        self,
        task_no: str,
        expected_status: TaskStatus,
        fields: dict[str, Any],
    ) -> Task | None:
        """WATCH task hash, проверить статус, применить поля в MULTI."""
        check_transition(task_no, expected_status, fields)
        key = self._task_key(task_no)
        encoded = encode_fields(fields)

        async with self.redis.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                raw = await pipe.hgetall(key)
                if not raw:
                    await pipe.unwatch()
                    return None

                current = _decode(raw)
                if current.get("status") != expected_status.value:
                    await pipe.unwatch()
                    logger.debug(
                        "CAS отклонён: статус изменился",
                        task_no=task_no,
                        expected=expected_status.value,
                        actual=current.get("status"),
                    )
                    return None

                pipe.multi()
                pipe.hset(key, mapping=encoded)
                if "provider_task_id" in encoded:
                    pipe.set(self._provider_key(encoded["provider_task_id"]), task_no)
                if fields.get("status") is not None and TaskStatus(fields["status"]).is_terminal:
                    pipe.srem(ACTIVE_KEY, task_no)
                await pipe.execute()
            except WatchError:
                logger.debug("CAS отклонён: параллельная запись", task_no=task_no)
                return None

        return Task.from_record({**current, **encoded})

    async def list_by_user(self, user_id: str, limit: int = 50) -> list[Task]:
        task_nos = await self.redis.zrevrange(self._user_key(user_id), 0, limit - 1)
        tasks = []
        for raw in task_nos:
            task = await self.get(raw.decode("utf-8"))
            if task is not None:
                tasks.append(task)
        return tasks

    async def list_active(self, limit: int = 100) -> list[str]:
        members = await self.redis.srandmember(ACTIVE_KEY, limit)
        return [m.decode("utf-8") for m in members or []]

    async def health_check(self) -> bool:
        """Проверить доступность Redis."""
        try:
            await self.redis.ping()
            return True
        except Exception as e:
            logger.exception("Redis недоступен", error=str(e))
            return False


class InMemoryTaskStore:
    """Task store в памяти процесса с теми же CAS гарантиями.

    Хранит плоские строковые записи, как Redis, чтобы сериализация
    проверялась и в тестах.

    Attributes:
        write_count: Количество успешных записей (insert + CAS)

    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, str]] = {}
        self._provider_index: dict[str, str] = {}
        self._lock = asyncio.Lock()
        self.write_count = 0

    async def insert_batch(self, tasks: list[Task]) -> None:
        async with self._lock:
            for task in tasks:
                self._records[task.task_no] = task.to_record()
                if task.provider_task_id:
                    self._provider_index[task.provider_task_id] = task.task_no
            self.write_count += len(tasks)

    async def get(self, task_no: str) -> Task | None:
        record = self._records.get(task_no)
        return Task.from_record(record) if record else None

    async def get_by_provider_task_id(self, provider_task_id: str) -> Task | None:
        task_no = self._provider_index.get(provider_task_id)
        return await self.get(task_no) if task_no else None

    async def compare_and_set(
        self,
        task_no: str,
        expected_status: TaskStatus,
        fields: dict[str, Any],
    ) -> Task | None:
        check_transition(task_no, expected_status, fields)
        encoded = encode_fields(fields)

        async with self._lock:
            record = self._records.get(task_no)
            if record is None or record.get("status") != expected_status.value:
                return None

            record.update(encoded)
            if "provider_task_id" in encoded:
                self._provider_index[encoded["provider_task_id"]] = task_no
            self.write_count += 1
            return Task.from_record(record)

    async def list_by_user(self, user_id: str, limit: int = 50) -> list[Task]:
        tasks = [Task.from_record(r) for r in self._records.values() if r.get("user_id") == user_id]
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        return tasks[:limit]

    async def list_active(self, limit: int = 100) -> list[str]:
        active = [
            task_no
            for task_no, record in self._records.items()
            if not TaskStatus(record["status"]).is_terminal
        ]
        return active[:limit]

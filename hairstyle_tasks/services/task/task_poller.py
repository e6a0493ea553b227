"""Task Poller - фоновый опрос активных задач.

Необязательный ускоритель: корректность обеспечивает advance,
poller лишь вызывает его чаще, чем это делают клиенты и webhooks.

Example:
    >>> poller = TaskPoller(manager, store, settings.tasks)
    >>> await poller.start()
    >>> await poller.stop()

"""

import asyncio
import contextlib

from hairstyle_tasks.core.config import TaskSettings
from hairstyle_tasks.services.task.task_lifecycle import TaskLifecycleManager
from hairstyle_tasks.services.task_store import TaskStore
from hairstyle_tasks.shared.errors import new_trace_id
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()


class TaskPoller:
    """Background loop, вызывающий advance для pending/running задач."""

    def __init__(
        self,
        manager: TaskLifecycleManager,
        task_store: TaskStore,
        config: TaskSettings,
    ) -> None:
        """Инициализировать poller.

        Args:
            manager: Lifecycle manager
            task_store: Источник активных задач
            config: Интервал и размер пачки

        """
        self.manager = manager
        self.task_store = task_store
        self.config = config

        self._running = False
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Loop запущен."""
        return self._running

    async def start(self) -> None:
        """Запустить background loop."""
        if self._running:
            logger.warning("TaskPoller уже запущен")
            return

        self._running = True
        self._worker_task = asyncio.create_task(self._poll_loop())

        logger.info("TaskPoller запущен", interval=self.config.poller_interval_seconds)

    async def stop(self) -> None:
        """Остановить background loop."""
        if not self._running:
            return

        self._running = False

        if self._worker_task:
            self._worker_task.cancel()

            with contextlib.suppress(asyncio.CancelledError):
                await self._worker_task

        logger.info("TaskPoller остановлен")

    async def poll_once(self) -> int:
        """Один проход по активным задачам.

        Returns:
            Сколько задач обработано без ошибок

        """
        new_trace_id()
        task_nos = await self.task_store.list_active(self.config.poller_batch_size)
        processed = 0

        for task_no in task_nos:
            try:
                await self.manager.advance(task_no)
                processed += 1
            except Exception as e:
                logger.exception("Ошибка опроса задачи", task_no=task_no, error=str(e))

        if task_nos:
            logger.debug("Проход poller завершён", total=len(task_nos), processed=processed)
        return processed

    async def _poll_loop(self) -> None:
        logger.info("Poll loop начат")

        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.exception("Ошибка в poll loop", error=str(e))

            await asyncio.sleep(self.config.poller_interval_seconds)

        logger.info("Poll loop завершён")

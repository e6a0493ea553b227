"""Task Lifecycle Manager - state machine задач генерации.

    pending  --[estimated_start_at <= now, submit ok]-->  running
    pending  --[submit упал]-->                           pending (progress 0)
    running  --[InProgress]-->                            running (progress)
    running  --[Success с URL]-->                         succeeded
    running  --[Success без URL]-->                       failed ("Result url not retrieved")
    running  --[Failure]-->                               failed (сообщение провайдера)
    succeeded/failed                                      только чтение

Все записи идут через TaskStore.compare_and_set, поэтому параллельные
advance (polling клиента и webhook) не портят состояние: проигравший
получает None и просто перечитывает задачу.

Example:
    >>> manager = TaskLifecycleManager(store, ledger, object_store, registry, settings.tasks, settings.storage)
    >>> batch = await manager.create_batch(request, user_id="user-1")
    >>> progress = await manager.advance(batch.tasks[0].task_no)

"""

from typing import Any

from hairstyle_tasks.core.config import StorageSettings, TaskSettings
from hairstyle_tasks.core.enums import TaskStatus
from hairstyle_tasks.models import (
    BatchResult,
    CreateBatchRequest,
    Task,
    TaskProgress,
    TaskResult,
    utcnow,
)
from hairstyle_tasks.providers import (
    RESULT_URL_MISSING,
    Failure,
    ImageProvider,
    InProgress,
    ProviderRegistry,
    Success,
)
from hairstyle_tasks.services.credit_ledger import CreditLedger
from hairstyle_tasks.services.object_store import ObjectStore, mirror_result, upload_photo
from hairstyle_tasks.services.task_store import TaskStore
from hairstyle_tasks.shared.errors import (
    InvalidReferenceError,
    ProviderError,
    TaskStateCorruptedError,
    ValidationError,
)
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

PROGRESS_NONE = 0.0
PROGRESS_DONE = 1.0


class TaskLifecycleManager:
    """Создание, dispatch и reconciliation задач.

    Attributes:
        task_store: Хранилище задач (CAS по статусу)
        ledger: Учёт кредитов
        object_store: Storage для фото и копий результатов
        providers: Registry провайдеров генерации
        task_settings: Стоимость и параметры задач
        storage_settings: Префиксы ключей и режим копирования результатов

    """

    def __init__(
        self,
        task_store: TaskStore,
        ledger: CreditLedger,
        object_store: ObjectStore,
        providers: ProviderRegistry,
        task_settings: TaskSettings,
        storage_settings: StorageSettings,
    ) -> None:
        """Инициализировать manager.

        Args:
            task_store: Хранилище задач
            ledger: Учёт кредитов
            object_store: Object storage
            providers: Registry провайдеров
            task_settings: Секция настроек tasks
            storage_settings: Секция настроек storage

        """
        self.task_store = task_store
        self.ledger = ledger
        self.object_store = object_store
        self.providers = providers
        self.task_settings = task_settings
        self.storage_settings = storage_settings

    def _provider_for(self, task: Task) -> ImageProvider:
        try:
            return self.providers.get(task.provider)
        except KeyError as e:
            raise TaskStateCorruptedError(task.task_no, f"provider '{task.provider.value}' не зарегистрирован") from e

    async def create_batch(self, request: CreateBatchRequest, user_id: str) -> BatchResult:
        """Создать пакет задач: одна задача на каждую выбранную причёску.

        Порядок: списание кредитов, загрузка фото, сохранение задач.
        Провайдерам ничего не отправляется, dispatch происходит в advance.

        Args:
            request: Провалидированный запрос
            user_id: Владелец задач

        Returns:
            Созданные задачи и receipt списания

        Raises:
            ValidationError: Нет причёсок или провайдер недоступен
            InsufficientCreditsError: Баланса не хватает, ничего не создано
            UploadFailedError: Фото не загрузилось (кредиты уже списаны)

        """
        if not request.hairstyles:
            raise ValidationError(message="Нужно выбрать хотя бы одну причёску")

        kind = request.model_type.provider
        if kind not in self.providers:
            raise ValidationError(
                message=f"Модель '{request.model_type.value}' недоступна",
                details={"field": "type"},
            )
        provider = self.providers.get(kind)

        cost = self.task_settings.credits_per_style * len(request.hairstyles)
        receipt = await self.ledger.debit(user_id, cost)

        photo = await upload_photo(
            self.object_store,
            request.photo,
            request.photo_filename,
            prefix=self.storage_settings.upload_prefix,
            content_type=request.photo_content_type,
        )

        color = request.hair_color
        detail = request.detail or None
        now = utcnow()

        tasks: list[Task] = []
        for style in request.hairstyles:
            ext: dict[str, Any] = {"hairstyle": style.name}
            if color.is_selected:
                ext["haircolor"] = color.name

            tasks.append(
                Task(
                    status=TaskStatus.PENDING,
                    provider=kind,
                    user_id=user_id,
                    aspect=provider.aspect,
                    created_at=now,
                    estimated_start_at=now,
                    request_param=provider.build_request(photo.url, style, color, detail),
                    input_params={
                        "photo": photo.url,
                        "hair_color": color.model_dump(),
                        "hairstyle": style.model_dump(),
                        "detail": request.detail,
                    },
                    ext=ext,
                )
            )

        await self.task_store.insert_batch(tasks)

        logger.info(
            "Пакет задач создан",
            user_id=user_id,
            provider=kind.value,
            count=len(tasks),
            credits=cost,
            receipt_id=receipt.receipt_id,
        )

        return BatchResult(tasks=[task.to_result() for task in tasks], receipt=receipt)

    async def dispatch(self, task: Task) -> TaskResult:
        """Отправить pending задачу провайдеру.

        Args:
            task: Задача в статусе pending

        Returns:
            Задача после перехода в running (или текущее состояние, если
            параллельный вызов успел раньше)

        Raises:
            InvalidReferenceError: Задача не pending или время старта не наступило
            ProviderError: Провайдер отклонил задачу

        """
        if task.status is not TaskStatus.PENDING:
            raise InvalidReferenceError(task.task_no, "задача не в статусе pending")

        if task.estimated_start_at > utcnow():
            raise InvalidReferenceError(task.task_no, "время старта ещё не наступило")

        provider = self._provider_for(task)
        provider_task_id = await provider.submit(task.request_param)

        updated = await self.task_store.compare_and_set(
            task.task_no,
            TaskStatus.PENDING,
            {
                "status": TaskStatus.RUNNING,
                "provider_task_id": provider_task_id,
                "started_at": utcnow(),
            },
        )

        if updated is None:
            # Параллельный dispatch уже перевёл задачу, наша задача у провайдера осиротела
            logger.warning(
                "Dispatch проиграл гонку",
                task_no=task.task_no,
                orphan_provider_task_id=provider_task_id,
            )
            current = await self.task_store.get(task.task_no)
            return (current or task).to_result()

        logger.info(
            "Задача отправлена провайдеру",
            task_no=task.task_no,
            provider=task.provider.value,
            provider_task_id=provider_task_id,
        )
        return updated.to_result()

    async def advance(self, task_or_no: Task | str) -> TaskProgress:
        """Продвинуть задачу по state machine.

        Идемпотентен: повторные вызовы безопасны, для финальных статусов
        это чистое чтение без записей и обращений к провайдеру.

        Args:
            task_or_no: Задача или её номер

        Returns:
            Состояние задачи и прогресс в долях [0, 1]

        Raises:
            InvalidReferenceError: Задача не найдена
            TaskStateCorruptedError: running задача без provider_task_id

        """
        task = await self._resolve(task_or_no)

        if task.status is TaskStatus.PENDING:
            try:
                result = await self.dispatch(task)
            except ProviderError as e:
                logger.warning(
                    "Dispatch не удался, задача остаётся pending",
                    task_no=task.task_no,
                    provider_code=e.provider_code,
                    error=e.provider_message,
                )
                return TaskProgress(task=task.to_result(), progress=PROGRESS_NONE)
            except TaskStateCorruptedError:
                raise
            except Exception as e:
                logger.warning("Dispatch пропущен", task_no=task.task_no, error=str(e))
                return TaskProgress(task=task.to_result(), progress=PROGRESS_NONE)
            return TaskProgress(task=result, progress=PROGRESS_NONE)

        if task.status.is_terminal:
            return TaskProgress(task=task.to_result(), progress=PROGRESS_DONE)

        if not task.provider_task_id:
            raise TaskStateCorruptedError(task.task_no, "running задача без provider_task_id")

        provider = self._provider_for(task)
        try:
            status = await provider.poll(task.provider_task_id)
        except ProviderError as e:
            logger.warning(
                "Не удалось получить статус у провайдера",
                task_no=task.task_no,
                provider_task_id=task.provider_task_id,
                provider_code=e.provider_code,
                error=e.provider_message,
            )
            return TaskProgress(task=task.to_result(), progress=PROGRESS_NONE)

        if isinstance(status, InProgress):
            return TaskProgress(task=task.to_result(), progress=status.progress)

        if isinstance(status, Success) and status.result_url:
            return await self._complete(task, status)

        if isinstance(status, Success):
            return await self._fail(task, RESULT_URL_MISSING, status.raw)

        return await self._fail(task, status.message, status.raw)

    async def advance_by_provider_id(self, provider_task_id: str) -> TaskProgress:
        """Webhook entry point: продвинуть задачу по ID провайдера.

        Raises:
            InvalidReferenceError: Задача не найдена или не в статусе running

        """
        task = await self.task_store.get_by_provider_task_id(provider_task_id)
        if task is None:
            raise InvalidReferenceError(provider_task_id, "задача не найдена")
        if task.status is not TaskStatus.RUNNING:
            raise InvalidReferenceError(provider_task_id, f"задача в статусе {task.status.value}")

        return await self.advance(task)

    async def get_task(self, task_no: str) -> TaskResult:
        """Прочитать задачу без продвижения."""
        task = await self._resolve(task_no)
        return task.to_result()

    async def list_user_tasks(self, user_id: str, limit: int = 50) -> list[TaskResult]:
        """Задачи пользователя, новые первыми."""
        tasks = await self.task_store.list_by_user(user_id, limit)
        return [task.to_result() for task in tasks]

    async def _resolve(self, task_or_no: Task | str) -> Task:
        if isinstance(task_or_no, Task):
            return task_or_no

        task = await self.task_store.get(task_or_no)
        if task is None:
            raise InvalidReferenceError(task_or_no, "задача не найдена")
        return task

    async def _complete(self, task: Task, status: Success) -> TaskProgress:
        result_url = status.result_url
        if self.storage_settings.mirror_results and result_url:
            mirrored = await mirror_result(
                self.object_store,
                result_url,
                task.task_no,
                prefix=self.storage_settings.result_prefix,
            )
            result_url = mirrored or result_url

        updated = await self.task_store.compare_and_set(
            task.task_no,
            TaskStatus.RUNNING,
            {
                "status": TaskStatus.SUCCEEDED,
                "completed_at": utcnow(),
                "result_url": result_url,
                "result_data": status.raw,
            },
        )
        if updated is None:
            return await self._reread(task)

        logger.info("Задача выполнена", task_no=task.task_no, result_url=result_url)
        return TaskProgress(task=updated.to_result(), progress=PROGRESS_DONE)

    async def _fail(self, task: Task, reason: str, raw: dict[str, Any]) -> TaskProgress:
        updated = await self.task_store.compare_and_set(
            task.task_no,
            TaskStatus.RUNNING,
            {
                "status": TaskStatus.FAILED,
                "completed_at": utcnow(),
                "fail_reason": reason,
                "result_data": raw,
            },
        )
        if updated is None:
            return await self._reread(task)

        logger.info("Задача завершилась ошибкой", task_no=task.task_no, fail_reason=reason)
        return TaskProgress(task=updated.to_result(), progress=PROGRESS_DONE)

    async def _reread(self, task: Task) -> TaskProgress:
        """Вернуть сохранённое состояние после проигранного CAS."""
        current = await self.task_store.get(task.task_no) or task
        progress = PROGRESS_DONE if current.status.is_terminal else PROGRESS_NONE
        return TaskProgress(task=current.to_result(), progress=progress)

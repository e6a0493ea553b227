"""Domain errors.

Доменные исключения lifecycle задач.
"""

from typing import Any

from hairstyle_tasks.shared.errors.base import AppException


class ValidationError(AppException):
    """Ошибка валидации данных."""

    status_code = 422
    code = "VALIDATION_ERROR"


class InsufficientCreditsError(AppException):
    """Недостаточно кредитов."""

    status_code = 402

    def __init__(self, user_id: str, required: int, balance: int) -> None:
        """Инициализация исключения.

        Args:
            user_id: Пользователь, у которого не хватило кредитов.
            required: Сколько требовалось списать.
            balance: Текущий баланс.

        """
        self.user_id = user_id
        self.required = required
        self.balance = balance
        super().__init__(
            message=f"Недостаточно кредитов: требуется {required}, доступно {balance}",
            details={"required": required, "balance": balance},
        )


class InvalidReferenceError(AppException):
    """Задача не найдена или в неподходящем статусе."""

    status_code = 404

    def __init__(self, reference: str, reason: str | None = None) -> None:
        """Инициализация исключения.

        Args:
            reference: task_no или provider task id.
            reason: Почему ссылка невалидна.

        """
        self.reference = reference
        message = f"Невалидная ссылка на задачу '{reference}'"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, details={"reference": reference, "reason": reason})


class ProviderError(AppException):
    """Ошибка провайдера генерации."""

    status_code = 502
    code = "PROVIDER_ERROR"
    retryable = True

    def __init__(
        self,
        provider_code: int | str,
        message: str,
        data: Any = None,
    ) -> None:
        """Инициализация исключения.

        Args:
            provider_code: Код из envelope провайдера или HTTP статус.
            message: Сообщение провайдера.
            data: Сырые данные ответа (для диагностики).

        """
        self.provider_code = provider_code
        self.provider_message = message
        self.data = data
        super().__init__(
            message=f"Провайдер вернул ошибку {provider_code}: {message}",
            details={"code": provider_code, "message": message},
        )


class TaskStateCorruptedError(AppException):
    """Нарушен инвариант состояния задачи."""

    status_code = 500

    def __init__(self, task_no: str, reason: str) -> None:
        """Инициализация исключения.

        Args:
            task_no: Номер задачи.
            reason: Какой инвариант нарушен.

        """
        self.task_no = task_no
        super().__init__(
            message=f"Повреждено состояние задачи '{task_no}': {reason}",
            details={"context": {"task_no": task_no, "reason": reason}},
        )


class UploadFailedError(AppException):
    """Не удалось загрузить файл в storage."""

    status_code = 502
    retryable = True


class UnauthorizedError(AppException):
    """Пользователь не определён."""

    status_code = 401


class LedgerConflictError(AppException):
    """Баланс изменяется параллельно, повторите запрос."""

    status_code = 409
    retryable = True

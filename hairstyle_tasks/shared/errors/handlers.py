"""Exception handlers for FastAPI.

Все ошибки отдаются в формате ErrorResponse с X-Trace-Id.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from hairstyle_tasks.shared.errors.base import AppException
from hairstyle_tasks.shared.errors.context import get_trace_id
from hairstyle_tasks.shared.errors.schemas import ErrorResponse

RETRY_AFTER_SECONDS = "1"


def _error_response(status_code: int, body: ErrorResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers={"X-Trace-Id": body.trace_id, **(headers or {})},
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Доменные ошибки: 4xx логируются как warning, 5xx как error."""
    log = logger.error if exc.is_server_error else logger.warning
    log(f"Business error: {exc.code}", path=request.url.path, **exc.log_fields())

    headers = {"X-Error-Code": exc.code}
    if exc.retryable:
        headers["Retry-After"] = RETRY_AFTER_SECONDS

    return _error_response(exc.status_code, exc.to_response(), headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Ошибки валидации FastAPI (отсутствующие поля формы, query параметры)."""
    errors = [f"{'.'.join(str(p) for p in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()]
    logger.warning("Validation error", errors=errors, path=request.url.path)

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(
            error="VALIDATION_ERROR",
            message="Ошибка валидации входных данных",
            details={"errors": errors},
            trace_id=get_trace_id(),
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Непредвиденные ошибки: детали только в логах."""
    logger.exception(
        "Unhandled exception",
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        path=request.url.path,
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(
            error="INTERNAL_SERVER_ERROR",
            message="Внутренняя ошибка сервера",
            trace_id=get_trace_id(),
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Зарегистрировать обработчики исключений в FastAPI.

    Args:
        app: Экземпляр FastAPI приложения.

    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")

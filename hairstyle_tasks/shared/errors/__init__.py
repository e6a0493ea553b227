"""Shared errors module.

Система обработки ошибок приложения.
"""

from hairstyle_tasks.shared.errors.base import AppException
from hairstyle_tasks.shared.errors.context import get_trace_id, new_trace_id, set_trace_id, trace_id_var
from hairstyle_tasks.shared.errors.domain_errors import (
    InsufficientCreditsError,
    InvalidReferenceError,
    LedgerConflictError,
    ProviderError,
    TaskStateCorruptedError,
    UnauthorizedError,
    UploadFailedError,
    ValidationError,
)
from hairstyle_tasks.shared.errors.handlers import setup_exception_handlers
from hairstyle_tasks.shared.errors.schemas import ErrorDetail, ErrorResponse

__all__ = [
    # Base
    "AppException",
    # Context
    "trace_id_var",
    "get_trace_id",
    "new_trace_id",
    "set_trace_id",
    # Domain errors
    "InsufficientCreditsError",
    "InvalidReferenceError",
    "LedgerConflictError",
    "ProviderError",
    "TaskStateCorruptedError",
    "UnauthorizedError",
    "UploadFailedError",
    "ValidationError",
    # Handlers
    "setup_exception_handlers",
    # Schemas
    "ErrorDetail",
    "ErrorResponse",
]

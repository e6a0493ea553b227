"""API schemas."""

from hairstyle_tasks.api.schemas.requests import WebhookData, WebhookPayload, parse_batch_form
from hairstyle_tasks.api.schemas.responses import (
    BatchResponse,
    CreditsResponse,
    HealthResponse,
    TaskListResponse,
)

__all__ = [
    "BatchResponse",
    "CreditsResponse",
    "HealthResponse",
    "TaskListResponse",
    "WebhookData",
    "WebhookPayload",
    "parse_batch_form",
]

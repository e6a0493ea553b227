"""Hairstyle Tasks API.

Роутеры:
    /api/v1/tasks       - создание пакета и список задач
    /api/v1/credits     - баланс
    /api/task/{task_no} - статус задачи (advance)
    /webhooks/kie-image - callbacks Kie AI
    /health             - health check
"""

from fastapi import APIRouter

from hairstyle_tasks.api.routes import credits, health, tasks, webhooks

API_PREFIX = "/api/v1"

router = APIRouter()
router.include_router(tasks.router, prefix=API_PREFIX)
router.include_router(credits.router, prefix=API_PREFIX)
router.include_router(tasks.status_router)
router.include_router(webhooks.router)
router.include_router(health.router)

__all__ = ["API_PREFIX", "router"]

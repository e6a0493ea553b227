"""API routes."""

from hairstyle_tasks.api.routes import credits, health, tasks, webhooks

__all__ = ["credits", "health", "tasks", "webhooks"]

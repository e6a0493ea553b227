"""Task Management Module.

- TaskLifecycleManager: создание, dispatch и reconciliation задач
- TaskPoller: необязательный фоновый опрос активных задач

Example:
    >>> from hairstyle_tasks.services.task import TaskLifecycleManager
    >>> progress = await manager.advance(task_no)

"""

from hairstyle_tasks.services.task.task_lifecycle import TaskLifecycleManager
from hairstyle_tasks.services.task.task_poller import TaskPoller

__all__ = [
    "TaskLifecycleManager",
    "TaskPoller",
]

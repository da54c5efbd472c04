from fastapi import Depends

from taskmaster.tasks.service import TaskService
from taskmaster.tasks.store.base import TaskStore
from taskmaster.tasks.store.dependencies import get_task_store


def get_task_service(
    task_store: TaskStore = Depends(get_task_store),
) -> TaskService:
    return TaskService(task_store=task_store)

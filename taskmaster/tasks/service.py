import logging
from uuid import UUID

from taskmaster.common.exceptions import (
    ImmutableFieldException,
    InvalidResourceIdException,
    ResourceNotFoundException,
    ResourceType,
)
from taskmaster.tasks.schemas import PENDING_STATUS, Task, TaskFields
from taskmaster.tasks.store.base import TaskStore

logger = logging.getLogger(__name__)


def normalize_task_id(task_id: str) -> str | None:
    """Return the canonical form of a task ID, or None if it is not a UUID."""
    try:
        return str(UUID(task_id))
    except ValueError:
        return None


class TaskService:
    def __init__(self, *, task_store: TaskStore) -> None:
        self.task_store = task_store

    def list_tasks(self) -> list[Task]:
        return self.task_store.list_tasks()

    def create_task(self, fields: TaskFields) -> Task:
        # The store assigns the ID and new tasks always start out pending
        new_task = {name: value for name, value in fields.items() if name != "id"}
        new_task["status"] = PENDING_STATUS

        task = self.task_store.insert_task(new_task)
        logger.info(f"Created task '{task.id}'")
        return task

    def delete_task(self, task_id: str) -> None:
        canonical_id = normalize_task_id(task_id)
        if canonical_id is None:
            raise InvalidResourceIdException(ResourceType.TASK, task_id)
        task_id = canonical_id

        if self.task_store.delete_task(task_id) == 0:
            raise ResourceNotFoundException(ResourceType.TASK, task_id)

        logger.info(f"Deleted task '{task_id}'")

    def update_task_status(self, task_id: str, status: str) -> Task:
        task_id = normalize_task_id(task_id) or task_id
        task = self.task_store.find_and_update_task(task_id, {"status": status})
        if task is None:
            raise ResourceNotFoundException(ResourceType.TASK, task_id)

        logger.info(f"Set status of task '{task_id}' to '{status}'")
        return task

    def update_task(self, task_id: str, updates: TaskFields) -> None:
        if "id" in updates:
            raise ImmutableFieldException(ResourceType.TASK, "id")

        task_id = normalize_task_id(task_id) or task_id

        if self.task_store.update_task(task_id, updates) == 0:
            raise ResourceNotFoundException(ResourceType.TASK, task_id)

        logger.info(f"Updated fields {sorted(updates)} of task '{task_id}'")

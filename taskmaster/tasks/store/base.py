from abc import ABC, abstractmethod

from taskmaster.tasks.schemas import Task, TaskFields


class TaskStore(ABC):
    @abstractmethod
    def insert_task(self, fields: TaskFields) -> Task:
        """Persist ``fields`` under a newly generated ID and return the stored task."""
        pass

    @abstractmethod
    def list_tasks(self) -> list[Task]:
        pass

    @abstractmethod
    def find_and_update_task(self, task_id: str, updates: TaskFields) -> Task | None:
        """Merge ``updates`` into the task and return it, or None if it does not exist."""
        pass

    @abstractmethod
    def update_task(self, task_id: str, updates: TaskFields) -> int:
        """Merge ``updates`` into the task and return the number of matched tasks."""
        pass

    @abstractmethod
    def delete_task(self, task_id: str) -> int:
        pass

    @abstractmethod
    def ping(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from taskmaster.tasks.schemas import Task, TaskFields
from taskmaster.tasks.store.base import TaskStore
from taskmaster.tasks.store.postgres.model import Base, TaskModel


class PostgresTaskStore(TaskStore):
    def __init__(self, database_url: str, timeout: float | None = None):
        engine_options: dict[str, Any] = {"pool_pre_ping": True}
        if timeout is not None:
            engine_options["pool_timeout"] = timeout
            engine_options["connect_args"] = {
                "connect_timeout": max(1, int(timeout)),
                "options": f"-c statement_timeout={int(timeout * 1000)}",
            }

        self.engine = create_engine(database_url, **engine_options)
        self.Session = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def _map_task(self, task_id: str, data: dict[str, Any]) -> Task:
        return Task.model_validate({**data, "id": task_id})

    def insert_task(self, fields: TaskFields) -> Task:
        task_id = str(uuid4())
        data = dict(fields)

        with self.Session() as session:
            session.add(
                TaskModel(
                    id=task_id,
                    data=data,
                    created_at=datetime.now(timezone.utc),
                )
            )
            session.commit()

        return self._map_task(task_id, data)

    def list_tasks(self) -> list[Task]:
        with self.Session() as session:
            all_tasks = session.query(TaskModel).order_by(TaskModel.created_at).all()
            return [self._map_task(task.id, task.data) for task in all_tasks]

    def find_and_update_task(self, task_id: str, updates: TaskFields) -> Task | None:
        with self.Session() as session:
            task = (
                session.query(TaskModel)
                .filter_by(id=task_id)
                .with_for_update()
                .first()
            )

            if not task:
                return None

            data = {**task.data, **updates}
            task.data = data
            session.commit()

            return self._map_task(task_id, data)

    def update_task(self, task_id: str, updates: TaskFields) -> int:
        return 0 if self.find_and_update_task(task_id, updates) is None else 1

    def delete_task(self, task_id: str) -> int:
        with self.Session() as session:
            deleted = session.query(TaskModel).filter_by(id=task_id).delete()
            session.commit()
            return deleted

    def ping(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def close(self) -> None:
        self.engine.dispose()

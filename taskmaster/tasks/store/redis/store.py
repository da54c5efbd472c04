import json
from typing import Any
from uuid import uuid4

from taskmaster.common.redis import RedisClient
from taskmaster.tasks.schemas import Task, TaskFields
from taskmaster.tasks.store.base import TaskStore

# Merges ARGV (field, value, field, value, ...) into an existing hash and
# returns the resulting hash. Returns nil without writing if the key is gone,
# so an update racing a delete can never recreate the task.
MERGE_FIELDS_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return nil
end
for i = 1, #ARGV, 2 do
    redis.call('HSET', KEYS[1], ARGV[i], ARGV[i + 1])
end
return redis.call('HGETALL', KEYS[1])
"""


class RedisTaskStore(TaskStore):
    def __init__(self, *, redis_client: RedisClient, key_prefix: str):
        self.client = redis_client
        self.key_prefix = key_prefix
        self.merge_fields = self.client.register_script(MERGE_FIELDS_SCRIPT)

    def _get_task_key(self, task_id: str) -> str:
        return f"{self.key_prefix}:{task_id}"

    def _extract_task_id(self, key: str) -> str:
        return key[len(self.key_prefix) + 1 :]

    def _serialize_fields(self, fields: TaskFields) -> dict[str, str]:
        return {name: json.dumps(value) for name, value in fields.items()}

    def _map_task(self, task_id: str, mapping: dict[str, str]) -> Task:
        fields: dict[str, Any] = {
            name: json.loads(value) for name, value in mapping.items()
        }
        return Task.model_validate({**fields, "id": task_id})

    def _merge(self, task_id: str, updates: TaskFields) -> dict[str, str] | None:
        args: list[str] = []
        for name, value in self._serialize_fields(updates).items():
            args.extend([name, value])

        result = self.merge_fields(keys=[self._get_task_key(task_id)], args=args)
        if result is None:
            return None

        return dict(zip(result[::2], result[1::2]))

    def insert_task(self, fields: TaskFields) -> Task:
        task_id = str(uuid4())
        mapping = self._serialize_fields(fields)

        self.client.hset(self._get_task_key(task_id), mapping=mapping)  # type: ignore

        return self._map_task(task_id, mapping)

    def list_tasks(self) -> list[Task]:
        tasks: list[Task] = []
        for key in self.client.scan_iter(match=f"{self.key_prefix}:*"):
            mapping = self.client.hgetall(key)
            # Deleted between the scan and the read
            if not mapping:
                continue
            tasks.append(self._map_task(self._extract_task_id(key), mapping))
        return tasks

    def find_and_update_task(self, task_id: str, updates: TaskFields) -> Task | None:
        mapping = self._merge(task_id, updates)
        if mapping is None:
            return None
        return self._map_task(task_id, mapping)

    def update_task(self, task_id: str, updates: TaskFields) -> int:
        return 0 if self._merge(task_id, updates) is None else 1

    def delete_task(self, task_id: str) -> int:
        return int(self.client.delete(self._get_task_key(task_id)))

    def ping(self) -> None:
        self.client.ping()

    def close(self) -> None:
        self.client.close()

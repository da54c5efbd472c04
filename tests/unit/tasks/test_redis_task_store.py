import json
from unittest.mock import Mock
from uuid import UUID
import pytest
from pytest_mock import MockerFixture

from taskmaster.common.redis import RedisClient
from taskmaster.tasks.schemas import Task
from taskmaster.tasks.store.redis.store import MERGE_FIELDS_SCRIPT, RedisTaskStore

TASK_ID = "0b6f8a2e-4c1d-4f3a-9d7e-2a1b3c4d5e6f"


@pytest.fixture
def mock_merge_script(mocker: MockerFixture) -> Mock:
    return mocker.Mock()


@pytest.fixture
def mock_redis_client(mocker: MockerFixture, mock_merge_script: Mock) -> RedisClient:
    client = mocker.Mock(spec=RedisClient)
    client.register_script.return_value = mock_merge_script
    return client


@pytest.fixture
def task_store(mock_redis_client: RedisClient) -> RedisTaskStore:
    return RedisTaskStore(redis_client=mock_redis_client, key_prefix="tasks")


def test_registers_merge_script(
    task_store: RedisTaskStore, mock_redis_client: Mock
) -> None:
    mock_redis_client.register_script.assert_called_once_with(MERGE_FIELDS_SCRIPT)


def test_insert_task(
    task_store: RedisTaskStore,
    mocker: MockerFixture,
) -> None:
    mocker.patch(
        "taskmaster.tasks.store.redis.store.uuid4", return_value=UUID(TASK_ID)
    )
    mock_hset = mocker.patch.object(task_store.client, "hset")

    result = task_store.insert_task(
        {"title": "Buy milk", "tags": ["home"], "status": "pending"}
    )

    mock_hset.assert_called_once_with(
        f"tasks:{TASK_ID}",
        mapping={
            "title": '"Buy milk"',
            "tags": '["home"]',
            "status": '"pending"',
        },
    )
    assert isinstance(result, Task)
    assert result.id == TASK_ID
    assert result.status == "pending"
    assert result.model_dump() == {
        "id": TASK_ID,
        "status": "pending",
        "title": "Buy milk",
        "tags": ["home"],
    }


def test_list_tasks_skips_keys_deleted_during_scan(
    task_store: RedisTaskStore,
    mocker: MockerFixture,
) -> None:
    mock_scan_iter = mocker.patch.object(
        task_store.client,
        "scan_iter",
        return_value=iter(["tasks:first", "tasks:second"]),
    )
    mocker.patch.object(
        task_store.client,
        "hgetall",
        side_effect=[
            {"title": '"Buy milk"', "status": '"pending"', "done": "false"},
            {},
        ],
    )

    result = task_store.list_tasks()

    mock_scan_iter.assert_called_once_with(match="tasks:*")
    assert len(result) == 1
    assert result[0].id == "first"
    assert result[0].model_dump() == {
        "id": "first",
        "status": "pending",
        "title": "Buy milk",
        "done": False,
    }


def test_find_and_update_task(
    task_store: RedisTaskStore,
    mock_merge_script: Mock,
) -> None:
    mock_merge_script.return_value = [
        "title",
        '"Buy milk"',
        "status",
        '"done"',
    ]

    result = task_store.find_and_update_task(TASK_ID, {"status": "done"})

    mock_merge_script.assert_called_once_with(
        keys=[f"tasks:{TASK_ID}"], args=["status", '"done"']
    )
    assert result is not None
    assert result.id == TASK_ID
    assert result.status == "done"
    assert result.model_dump()["title"] == "Buy milk"


def test_find_and_update_task_not_found(
    task_store: RedisTaskStore,
    mock_merge_script: Mock,
) -> None:
    mock_merge_script.return_value = None

    assert task_store.find_and_update_task(TASK_ID, {"status": "done"}) is None


def test_update_task_serializes_nested_values(
    task_store: RedisTaskStore,
    mock_merge_script: Mock,
) -> None:
    mock_merge_script.return_value = ["status", '"pending"']

    matched = task_store.update_task(TASK_ID, {"meta": {"priority": 1}, "note": None})

    assert matched == 1
    mock_merge_script.assert_called_once_with(
        keys=[f"tasks:{TASK_ID}"],
        args=["meta", json.dumps({"priority": 1}), "note", "null"],
    )


def test_update_task_not_found(
    task_store: RedisTaskStore,
    mock_merge_script: Mock,
) -> None:
    mock_merge_script.return_value = None

    assert task_store.update_task(TASK_ID, {"title": "x"}) == 0


@pytest.mark.parametrize("deleted", [0, 1])
def test_delete_task(
    task_store: RedisTaskStore,
    mocker: MockerFixture,
    deleted: int,
) -> None:
    mock_delete = mocker.patch.object(task_store.client, "delete", return_value=deleted)

    assert task_store.delete_task(TASK_ID) == deleted
    mock_delete.assert_called_once_with(f"tasks:{TASK_ID}")


def test_ping_and_close(
    task_store: RedisTaskStore,
    mock_redis_client: Mock,
) -> None:
    task_store.ping()
    task_store.close()

    mock_redis_client.ping.assert_called_once_with()
    mock_redis_client.close.assert_called_once_with()

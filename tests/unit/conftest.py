from pathlib import Path
from typing import Generator
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskmaster.main import app as main_app
from taskmaster.tasks.store.base import TaskStore
from taskmaster.tasks.store.dependencies import get_task_store
from taskmaster.tasks.store.postgres.store import PostgresTaskStore


@pytest.fixture
def test_database_url(tmp_path: Path) -> str:
    db_path: Path = tmp_path / "test_tasks.db"
    return f"sqlite:///{db_path}"


@pytest.fixture
def sql_task_store(test_database_url: str) -> Generator[PostgresTaskStore, None, None]:
    store = PostgresTaskStore(database_url=test_database_url)
    yield store
    store.close()


@pytest.fixture
def make_test_app() -> Generator[FastAPI, None, None]:
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def test_client(make_test_app: FastAPI, sql_task_store: TaskStore) -> TestClient:
    """Client backed by a real SQL store; the lifespan is not run."""
    make_test_app.dependency_overrides[get_task_store] = lambda: sql_task_store
    return TestClient(make_test_app)

from typing import Any
from fastapi import APIRouter, Body, Depends, status

from taskmaster.common.exceptions import (
    ResourceType,
    immutable_field_response,
    invalid_resource_id_response,
    resource_not_found_response,
)
from taskmaster.tasks.dependencies import get_task_service
from taskmaster.tasks.schemas import (
    MessageResponse,
    Task,
    UpdateTaskRequest,
    UpdateTaskStatusRequest,
)
from taskmaster.tasks.service import TaskService


router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
)


@router.get("")
def list_tasks(task_service: TaskService = Depends(get_task_service)) -> list[Task]:
    return task_service.list_tasks()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    task_input: dict[str, Any] = Body(
        ..., examples=[{"title": "Buy milk", "description": "2 litres"}]
    ),
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.create_task(task_input)


@router.put("/{task_id}", responses={**resource_not_found_response(ResourceType.TASK)})
def update_task_status(
    task_id: str,
    status_input: UpdateTaskStatusRequest,
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.update_task_status(task_id, status_input.status)


@router.patch(
    "/{task_id}",
    responses={
        **immutable_field_response(ResourceType.TASK),
        **resource_not_found_response(ResourceType.TASK),
    },
)
def update_task(
    task_id: str,
    task_input: UpdateTaskRequest,
    task_service: TaskService = Depends(get_task_service),
) -> MessageResponse:
    task_service.update_task(task_id, task_input.model_dump(exclude_unset=True))
    return MessageResponse(message="Task updated successfully")


@router.delete(
    "/{task_id}",
    responses={
        **invalid_resource_id_response(ResourceType.TASK),
        **resource_not_found_response(ResourceType.TASK),
    },
)
def delete_task(
    task_id: str, task_service: TaskService = Depends(get_task_service)
) -> MessageResponse:
    task_service.delete_task(task_id)
    return MessageResponse(message="Task deleted successfully")

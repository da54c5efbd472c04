import logging
from typing import Any
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from taskmaster.config import Settings, get_settings
from taskmaster.tasks.store.base import TaskStore
from taskmaster.tasks.store.dependencies import get_task_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
def root() -> str:
    return "Simple Task Manager Crud is running..."


@router.get(
    "/healthcheck",
    tags=["Healthcheck"],
    status_code=status.HTTP_200_OK,
    responses={
        200: {
            "description": "Healthcheck status",
            "content": {
                "application/json": {
                    "example": {
                        "api": {"status": "ok"},
                        "store": {"status": "ok", "backend": "redis"},
                    }
                }
            },
        },
        503: {
            "description": "Service unavailable",
            "content": {
                "application/json": {
                    "example": {
                        "api": {"status": "ok"},
                        "store": {
                            "status": "error",
                            "backend": "redis",
                            "message": "Connection error",
                        },
                    }
                }
            },
        },
    },
)
def healthcheck(
    settings: Settings = Depends(get_settings),
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    health_status: dict[str, Any] = {
        "api": {"status": "ok"},
        "store": {"status": "ok", "backend": settings.TASK_STORE_BACKEND},
    }

    try:
        task_store.ping()
    except Exception as e:
        logger.error(f"Task store health check failed: {e}")
        health_status["store"].update({"status": "error", "message": str(e)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status
        )

    return JSONResponse(status_code=status.HTTP_200_OK, content=health_status)

import logging
from contextlib import asynccontextmanager
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from taskmaster.common.exceptions import (
    ImmutableFieldException,
    InvalidResourceIdException,
    ResourceNotFoundException,
    immutable_field_handler,
    invalid_resource_id_handler,
    resource_not_found_handler,
    store_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
    internal_error_response,
    validation_error_response,
)
from taskmaster.common.opentelemetry import setup_opentelemetry
from taskmaster.config import get_settings
from taskmaster.healthcheck.router import router as health_router
from taskmaster.tasks.router import router as tasks_router
from taskmaster.tasks.store.backend import get_task_store_backend

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        task_store = get_task_store_backend(settings)
        task_store.ping()
    except Exception as e:
        raise RuntimeError(
            f"Failed to connect to the {settings.TASK_STORE_BACKEND} task store"
        ) from e

    logger.info(f"Connected to the {settings.TASK_STORE_BACKEND} task store")
    app.state.task_store = task_store
    yield
    task_store.close()


app = FastAPI(
    title=settings.API_NAME,
    summary=settings.API_SUMMARY,
    lifespan=lifespan,
    responses={
        **internal_error_response,
        **validation_error_response,
    },
    version=settings.TASKMASTER_VERSION,
)

if settings.OTEL_ENABLED:
    setup_opentelemetry(settings.OTEL_SERVICE_NAME, app)

if settings.CORS_ENABLED:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ResourceNotFoundException)(resource_not_found_handler)
app.exception_handler(InvalidResourceIdException)(invalid_resource_id_handler)
app.exception_handler(ImmutableFieldException)(immutable_field_handler)
app.exception_handler(RedisError)(store_exception_handler)
app.exception_handler(SQLAlchemyError)(store_exception_handler)
app.exception_handler(Exception)(unexpected_exception_handler)


app.include_router(health_router)
app.include_router(tasks_router)


def serve() -> None:
    """Run the API server."""
    uvicorn.run(
        "taskmaster.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    serve()

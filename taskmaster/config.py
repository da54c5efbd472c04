from functools import lru_cache
from typing import Annotated, Any, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    # Application Configuration
    TASKMASTER_VERSION: str = "v1.0.x"
    API_NAME: str = "Task Master"
    API_SUMMARY: str = "A minimal task tracking API"

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    CORS_ENABLED: bool = True
    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "https://task-master-client-side.vercel.app",
    ]

    # Database Configuration
    REDIS_URL: str = "redis://localhost:6379"
    POSTGRES_URL: str = "postgresql://localhost:5432/taskmaster"  # Assumes a local Postgres db named 'taskmaster' exists

    TASK_STORE_BACKEND: Literal["postgres", "redis"] = "redis"
    TASK_STORE_NAMESPACE: str = "tasks"
    STORE_TIMEOUT_SECONDS: float = 5.0

    # OpenTelemetry Settings
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "taskmaster"

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: Any):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    def validate_list_from_string(cls, v: Any):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",")]
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings():
    return Settings()

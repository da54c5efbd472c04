from enum import Enum
import logging
from typing import Any
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    TASK = "Task"


# Exceptions
class ResourceNotFoundException(Exception):
    def __init__(self, resource_type: ResourceType, identifier: str):
        self.resource_type = resource_type.value
        self.identifier = identifier
        super().__init__(f"{self.resource_type} '{identifier}' not found")


class InvalidResourceIdException(Exception):
    def __init__(self, resource_type: ResourceType, identifier: str):
        self.resource_type = resource_type.value
        self.identifier = identifier
        super().__init__(f"Invalid {self.resource_type.lower()} ID '{identifier}'")


class ImmutableFieldException(Exception):
    def __init__(self, resource_type: ResourceType, field: str):
        self.resource_type = resource_type.value
        self.field = field
        super().__init__(f"{self.resource_type} field '{field}' cannot be modified")


# Exception handlers
def resource_not_found_handler(request: Request, exc: ResourceNotFoundException):
    logger.error(exc)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": f"{exc.resource_type} not found"},
    )


def invalid_resource_id_handler(request: Request, exc: InvalidResourceIdException):
    logger.error(exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid {exc.resource_type.lower()} ID"},
    )


def immutable_field_handler(request: Request, exc: ImmutableFieldException):
    logger.error(exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc)},
    )


def store_exception_handler(request: Request, exc: Exception):
    logger.error(f"Task store request failed: {exc!r}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


def unexpected_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {exc!r}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


def validation_exception_handler(request: Request, exc: RequestValidationError):
    def loc_to_dot_sep(loc: tuple[Any, ...]) -> str:
        """Convert a tuple of location parts to a dot-separated string"""
        path = ""
        for i, x in enumerate(loc):
            if isinstance(x, str):
                if i > 0:
                    path += "."
                path += x
            elif isinstance(x, int):
                path += f"[{x}]"
            else:
                raise TypeError("Unexpected type")
        return path

    errors = [
        {
            "type": error["type"],
            "loc": loc_to_dot_sep(error["loc"]),
            "msg": error["msg"],
            "input": error.get("input"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Validation error", "errors": errors},
    )


# Response definitions for OpenAPI documentation
ResponseDict = dict[int | str, dict[str, Any]]


def resource_not_found_response(
    resource_type: ResourceType,
) -> ResponseDict:
    return {
        404: {
            "description": f"{resource_type.value} not found",
            "content": {
                "application/json": {
                    "example": {"error": f"{resource_type.value} not found"}
                }
            },
        }
    }


def invalid_resource_id_response(resource_type: ResourceType) -> ResponseDict:
    return {
        400: {
            "description": f"Malformed {resource_type.value.lower()} ID",
            "content": {
                "application/json": {
                    "example": {"error": f"Invalid {resource_type.value.lower()} ID"}
                }
            },
        }
    }


def immutable_field_response(resource_type: ResourceType) -> ResponseDict:
    return {
        400: {
            "description": f"Attempt to modify a read-only {resource_type.value.lower()} field",
            "content": {
                "application/json": {
                    "example": {
                        "error": f"{resource_type.value} field 'id' cannot be modified"
                    }
                }
            },
        }
    }


internal_error_response: ResponseDict = {
    500: {
        "description": "Internal server error",
        "content": {
            "application/json": {"example": {"error": "Internal Server Error"}}
        },
    }
}

validation_error_response: ResponseDict = {
    422: {
        "description": "Validation error",
        "content": {
            "application/json": {
                "example": {
                    "error": "Validation error",
                    "errors": [
                        {
                            "type": "type",
                            "loc": "field.sub_field",
                            "msg": "error message",
                            "input": "input value",
                        }
                    ],
                }
            }
        },
    }
}

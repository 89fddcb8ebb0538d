"""Request validation error handling for FastAPI."""

from logging import getLogger
from typing import Any, cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from app.utils.helpers import file_logger, host

logger = file_logger(getLogger(__name__))


def format_validation_errors(errors: list[dict[str, Any]], skip: int = 0) -> list[dict[str, Any]]:
    """
    Flatten pydantic error dicts into ``field``/``message``/``type`` records.

    Args:
        errors: Errors as returned by ``ValidationError.errors()``.
        skip: Number of leading ``loc`` items to drop (1 drops FastAPI's ``body``).

    Returns:
        Formatted errors, JSON serializable.
    """
    formatted_errors = []
    for error in errors:
        formatted_error: dict[str, Any] = {
            "field": ".".join(str(loc) for loc in error.get("loc", ())[skip:]),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error"),
        }
        if "input" in error:
            formatted_error["input"] = error["input"]
        # Exceptions inside ctx are not serializable
        if "ctx" in error:
            formatted_error["context"] = {
                key: str(value) if isinstance(value, Exception) else value
                for key, value in error["ctx"].items()
            }
        formatted_errors.append(formatted_error)
    return formatted_errors


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle Pydantic validation errors with cleaner response format.

    Args:
        request: The incoming request.
        exc: The RequestValidationError exception.

    Returns:
        ORJSONResponse with formatted validation errors.
    """
    exec_error = cast(RequestValidationError, exc)
    formatted_errors = format_validation_errors(list(exec_error.errors()), skip=1)

    logger.warning(
        f"Validation error for ip: {host(request)} at endpoint {request.url.path}: {formatted_errors}",
    )

    return ORJSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "detail": "Validation failed",
            "errors": formatted_errors,
        },
    )

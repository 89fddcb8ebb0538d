from collections.abc import Awaitable, Callable
from logging import Logger
from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from app.utils.helpers import host


class BaseAppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        detail: str = "Internal Server Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        return self.detail

    def to_dict(self) -> dict[str, Any]:
        """Return the response body: ``detail`` plus any extra public attributes."""
        content: dict[str, Any] = {"detail": self.detail}
        content.update(
            {
                k: v
                for k, v in self.__dict__.items()
                if k not in ("status_code", "detail") and not k.startswith("_")
            },
        )
        return content


def create_exception_handler(
    logger: Logger,
) -> Callable[[Request, Exception], Awaitable[ORJSONResponse]]:
    """
    Create a standardized exception handler for the application.

    Args:
        logger: Logger instance to use for logging exceptions.

    Returns:
        A callable exception handler.
    """

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        if isinstance(exc, BaseAppError):
            status_code = exc.status_code
            content = exc.to_dict()
        else:
            status_code = HTTP_500_INTERNAL_SERVER_ERROR
            content = {"detail": "Internal Server Error"}

        logger.warning(
            f"{content['detail']} for ip: {host(request)} for endpoint {request.url.path}",
        )

        return ORJSONResponse(content=content, status_code=status_code)

    return handler

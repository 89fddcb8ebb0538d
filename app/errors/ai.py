from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import Any

from fastapi.responses import ORJSONResponse
from starlette.requests import Request
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
    HTTP_504_GATEWAY_TIMEOUT,
)

from app.errors.base import BaseAppError, create_exception_handler
from app.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class AiError(BaseAppError):
    """Base exception for AI client and generation pipeline errors."""

    def __init__(self, detail: str = "AI client error") -> None:
        super().__init__(
            detail=detail,
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )


class ConfigurationError(AiError):
    """Missing credentials or failed client initialization. Fatal at startup."""

    def __init__(self, detail: str = "AI service configuration error") -> None:
        super().__init__(detail)
        self.status_code = HTTP_503_SERVICE_UNAVAILABLE


class AiAuthenticationError(AiError):
    """Authentication failed."""

    def __init__(self, detail: str = "AI authentication failed") -> None:
        super().__init__(detail)
        self.status_code = HTTP_401_UNAUTHORIZED


class TransientServiceError(AiError):
    """
    Network, timeout, rate-limit or 5xx failure of the model service.

    A retry of the same request may succeed.
    """

    def __init__(self, detail: str = "AI service temporarily unavailable") -> None:
        super().__init__(detail)
        self.status_code = HTTP_503_SERVICE_UNAVAILABLE


class AiNetworkError(TransientServiceError):
    """Network connectivity issues."""

    def __init__(self, detail: str = "AI network error") -> None:
        super().__init__(detail)


class AiTimeoutError(TransientServiceError):
    """The model call did not finish within the per-call timeout."""

    def __init__(self, detail: str = "AI request timed out") -> None:
        super().__init__(detail)
        self.status_code = HTTP_504_GATEWAY_TIMEOUT


class AiQuotaExceededError(TransientServiceError):
    """Quota exceeded."""

    def __init__(self, detail: str = "AI quota exceeded") -> None:
        super().__init__(detail)
        self.status_code = HTTP_429_TOO_MANY_REQUESTS


class MalformedResponseError(AiError):
    """No parseable JSON value could be extracted from the model output."""

    def __init__(self, detail: str = "Malformed AI response") -> None:
        super().__init__(detail)
        self.status_code = HTTP_502_BAD_GATEWAY


class SchemaValidationError(AiError):
    """
    Well-formed JSON that violates the itinerary schema or one of its invariants.

    Attributes:
        field: Dotted path of the offending value, e.g. ``dayPlans[0].activities[1].endTime``.
        reason: Human readable reason.
        day_index: Zero-based day index, when the error is inside a day plan.
        activity_index: Zero-based activity index, when the error is inside an activity.
        expected: What the schema expected, when known.
        actual: The value that was received, when known.
        errors: Every violation found, not only the first one.
    """

    def __init__(
        self,
        reason: str = "Invalid AI response schema",
        field: str | None = None,
        day_index: int | None = None,
        activity_index: int | None = None,
        expected: Any = None,  # noqa: ANN401
        actual: Any = None,  # noqa: ANN401
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        detail = f"{field}: {reason}" if field else reason
        super().__init__(detail)
        self.status_code = HTTP_502_BAD_GATEWAY
        self.field = field
        self.reason = reason
        self.day_index = day_index
        self.activity_index = activity_index
        self.expected = expected
        self.actual = actual
        self.errors = errors or []


class AssemblyInconsistencyError(AiError):
    """Merged chunks disagree with their validated parts. Fatal for the request."""

    def __init__(self, detail: str = "Itinerary assembly is inconsistent") -> None:
        super().__init__(detail)


class GenerationCancelledError(AiError):
    """The generation request was aborted by its caller."""

    def __init__(self, detail: str = "Itinerary generation cancelled") -> None:
        super().__init__(detail)
        self.status_code = HTTP_503_SERVICE_UNAVAILABLE


# Create the exception handler using the helper
ai_exception_handler: Callable[[Request, Exception], Awaitable[ORJSONResponse]] = (
    create_exception_handler(logger)
)

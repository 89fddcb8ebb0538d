from app.errors.ai import (
    AiAuthenticationError,
    AiError,
    AiNetworkError,
    AiQuotaExceededError,
    AiTimeoutError,
    AssemblyInconsistencyError,
    ConfigurationError,
    GenerationCancelledError,
    MalformedResponseError,
    SchemaValidationError,
    TransientServiceError,
    ai_exception_handler,
)
from app.errors.base import BaseAppError, create_exception_handler
from app.errors.validation import validation_exception_handler

__all__ = [
    "AiAuthenticationError",
    "AiError",
    "AiNetworkError",
    "AiQuotaExceededError",
    "AiTimeoutError",
    "AssemblyInconsistencyError",
    "BaseAppError",
    "ConfigurationError",
    "GenerationCancelledError",
    "MalformedResponseError",
    "SchemaValidationError",
    "TransientServiceError",
    "ai_exception_handler",
    "create_exception_handler",
    "validation_exception_handler",
]

"""Protocol definitions for generative model client implementations."""

from collections.abc import Awaitable
from logging import DEBUG
from typing import Protocol, runtime_checkable


@runtime_checkable
class ModelClientProtocol(Protocol):
    """
    Protocol for text-in/text-out generative model clients.

    The client knows nothing about the itinerary schema; all structure is
    imposed by the generation pipeline. Implementations must be safe to call
    concurrently from independent requests.

    Implementations raise ``TransientServiceError`` subclasses for failures
    a retry may fix (network, timeout, rate limit, 5xx) and other ``AiError``
    subclasses for everything else.
    """

    def invoke(self, prompt: str) -> Awaitable[str]:
        """Send a prompt and return the raw model text."""
        ...


def is_debug_enabled(logger_level: int) -> bool:
    """Check if debug logging is enabled without evaluating log arguments."""
    return logger_level <= DEBUG

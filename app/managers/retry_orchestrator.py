# app/managers/retry_orchestrator.py
"""
Bounded retry with exponential backoff for model calls.

Retry eligibility is decided by exception type only:

    - TransientServiceError, MalformedResponseError -> retried with backoff
    - SchemaValidationError and any other error       -> re-raised immediately

States of one run:

    Pending -> Invoking -> Success
                        -> TransientFailure -> (attempts left) backoff -> Invoking
                                            -> (none left) Exhausted, last error re-raised
                        -> ValidationFailure -> Exhausted, re-raised at once

Both suspension points (the operation itself and the backoff sleep) are
plain awaits, so task cancellation stops a run promptly. An optional
``asyncio.Event`` cancels between attempts and interrupts backoff sleeps.
"""

from asyncio import Event, sleep, wait_for
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from logging import getLogger
from typing import Self, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.configs.settings import settings
from app.errors import GenerationCancelledError, MalformedResponseError, TransientServiceError
from app.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

T = TypeVar("T")

RETRIABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    TransientServiceError,
    MalformedResponseError,
)

OnRetry = Callable[[BaseException, int, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt limit and backoff curve: ``min(initial_delay * factor**attempt, max_delay)``."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    factor: float = 2.0
    max_delay: float = 10.0

    @classmethod
    def generation(cls) -> Self:
        """Policy for day-plan chunks."""
        return cls(
            max_attempts=settings.AI_MAX_RETRIES,
            initial_delay=settings.AI_RETRY_DELAY,
            factor=settings.AI_BACKOFF_FACTOR,
            max_delay=settings.AI_MAX_RETRY_DELAY,
        )

    @classmethod
    def auxiliary(cls) -> Self:
        """Policy for tips, insights and activity suggestions."""
        return cls(
            max_attempts=settings.AI_AUX_MAX_RETRIES,
            initial_delay=settings.AI_RETRY_DELAY,
            factor=settings.AI_BACKOFF_FACTOR,
            max_delay=settings.AI_MAX_RETRY_DELAY,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before the attempt following failed attempt number ``attempt`` (1-based)."""
        return min(self.initial_delay * self.factor**attempt, self.max_delay)


@dataclass(frozen=True)
class RetryAttempt:
    """Snapshot handed to observers; lives only for one run."""

    attempt: int
    error: BaseException
    delay: float


def raise_if_cancelled(cancel_event: Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise GenerationCancelledError


async def cancellable_sleep(seconds: float, cancel_event: Event | None = None) -> None:
    """Sleep for ``seconds``; raise GenerationCancelledError as soon as the event is set."""
    if cancel_event is None:
        await sleep(seconds)
        return
    try:
        await wait_for(cancel_event.wait(), timeout=seconds)
    except TimeoutError:
        return
    raise GenerationCancelledError


class RetryOrchestrator:
    """
    Run an async operation under a RetryPolicy.

    Attributes:
        policy: Attempt limit and backoff parameters.
        name: Label used in log messages.
        last_attempt: The most recent failed attempt, or None.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        on_retry: OnRetry | None = None,
        name: str = "operation",
    ) -> None:
        self.policy = policy or RetryPolicy.generation()
        self.name = name
        self._on_retry = on_retry
        self.last_attempt: RetryAttempt | None = None

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        """Log the failed attempt and notify the observer before backing off."""
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        attempt = retry_state.attempt_number
        if error is None:
            return

        self.last_attempt = RetryAttempt(attempt=attempt, error=error, delay=delay)
        logger.warning(
            "Retry %d/%d for %s after %.2fs delay. Exception: %s",
            attempt,
            self.policy.max_attempts,
            self.name,
            delay,
            error,
        )
        if self._on_retry is not None:
            self._on_retry(error, attempt, delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        cancel_event: Event | None = None,
    ) -> T:
        """
        Invoke ``operation`` until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument coroutine function, invoked once per attempt.
            cancel_event: Optional signal that aborts the run between attempts.

        Returns:
            The operation's result.

        Raises:
            GenerationCancelledError: If ``cancel_event`` is set.
            Exception: The last retriable error once attempts are exhausted, or
                any non-retriable error immediately.
        """
        raise_if_cancelled(cancel_event)
        policy = self.policy

        async def attempt() -> T:
            raise_if_cancelled(cancel_event)
            return await operation()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            # multiplier * exp_base ** (n - 1) == initial_delay * factor ** n
            wait=wait_exponential(
                multiplier=policy.initial_delay * policy.factor,
                exp_base=policy.factor,
                max=policy.max_delay,
            ),
            retry=retry_if_exception_type(RETRIABLE_EXCEPTIONS),
            before_sleep=self._before_sleep,
            sleep=partial(cancellable_sleep, cancel_event=cancel_event),
            reraise=True,
        )
        return await retrying(attempt)

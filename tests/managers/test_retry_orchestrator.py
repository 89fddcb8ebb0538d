# tests/managers/test_retry_orchestrator.py
"""Tests for app/managers/retry_orchestrator.py module."""

from asyncio import CancelledError, Event, create_task, sleep
from time import perf_counter
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.errors import (
    AiAuthenticationError,
    AiNetworkError,
    AiQuotaExceededError,
    AiTimeoutError,
    GenerationCancelledError,
    MalformedResponseError,
    SchemaValidationError,
    TransientServiceError,
)
from app.managers.retry_orchestrator import (
    RetryOrchestrator,
    RetryPolicy,
    cancellable_sleep,
)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_defaults_from_settings(self) -> None:
        assert RetryPolicy.generation().max_attempts == 3
        assert RetryPolicy.auxiliary().max_attempts == 2

    def test_delay_curve_is_capped(self) -> None:
        policy = RetryPolicy(max_attempts=5, initial_delay=1.0, factor=2.0, max_delay=10.0)
        assert [policy.delay_for(n) for n in range(1, 5)] == [2.0, 4.0, 8.0, 10.0]


class TestRetryOrchestrator:
    """Tests for retry classification and attempt counting."""

    @pytest.mark.asyncio
    async def test_success_first_try(self, no_delay_policy: RetryPolicy) -> None:
        operation = AsyncMock(return_value="ok")
        result = await RetryOrchestrator(no_delay_policy).run(operation)

        assert result == "ok"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_errors_exhaust_attempts(self, no_delay_policy: RetryPolicy) -> None:
        operation = AsyncMock(side_effect=TransientServiceError("service down"))

        with pytest.raises(TransientServiceError, match="service down"):
            await RetryOrchestrator(no_delay_policy).run(operation)

        assert operation.await_count == no_delay_policy.max_attempts

    @pytest.mark.asyncio
    async def test_schema_error_is_not_retried(self, no_delay_policy: RetryPolicy) -> None:
        operation = AsyncMock(side_effect=SchemaValidationError("bad enum", field="type"))

        with pytest.raises(SchemaValidationError):
            await RetryOrchestrator(no_delay_policy).run(operation)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_unclassified_error_is_not_retried(self, no_delay_policy: RetryPolicy) -> None:
        operation = AsyncMock(side_effect=AiAuthenticationError())

        with pytest.raises(AiAuthenticationError):
            await RetryOrchestrator(no_delay_policy).run(operation)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            AiNetworkError(),
            AiTimeoutError(),
            AiQuotaExceededError(),
            MalformedResponseError(),
        ],
    )
    async def test_retriable_errors_then_success(
        self,
        no_delay_policy: RetryPolicy,
        error: Exception,
    ) -> None:
        operation = AsyncMock(side_effect=[error, error, "ok"])

        assert await RetryOrchestrator(no_delay_policy).run(operation) == "ok"
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_last_error_is_reraised(self, no_delay_policy: RetryPolicy) -> None:
        last = MalformedResponseError("third")
        operation = AsyncMock(
            side_effect=[AiNetworkError("first"), AiTimeoutError("second"), last],
        )

        with pytest.raises(MalformedResponseError) as exc_info:
            await RetryOrchestrator(no_delay_policy).run(operation)

        assert exc_info.value is last

    @pytest.mark.asyncio
    async def test_schema_error_after_transient_stops(self, no_delay_policy: RetryPolicy) -> None:
        operation = AsyncMock(side_effect=[AiNetworkError(), SchemaValidationError("bad")])

        with pytest.raises(SchemaValidationError):
            await RetryOrchestrator(no_delay_policy).run(operation)

        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_on_retry_observer(self) -> None:
        policy = RetryPolicy(max_attempts=3, initial_delay=0.001, factor=2.0, max_delay=0.003)
        on_retry = MagicMock()
        first, second = AiNetworkError("a"), AiNetworkError("b")
        operation = AsyncMock(side_effect=[first, second, "ok"])

        orchestrator = RetryOrchestrator(policy, on_retry=on_retry, name="chunk 1/2")
        await orchestrator.run(operation)

        assert on_retry.call_count == 2
        (error_1, attempt_1, delay_1), _ = on_retry.call_args_list[0]
        (error_2, attempt_2, delay_2), _ = on_retry.call_args_list[1]
        assert (error_1, attempt_1) == (first, 1)
        assert (error_2, attempt_2) == (second, 2)
        assert delay_1 == pytest.approx(policy.delay_for(1))
        assert delay_2 == pytest.approx(policy.delay_for(2))
        assert orchestrator.last_attempt is not None
        assert orchestrator.last_attempt.attempt == 2

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self) -> None:
        operation = AsyncMock(side_effect=AiNetworkError())

        with pytest.raises(AiNetworkError):
            await RetryOrchestrator(RetryPolicy(max_attempts=1, initial_delay=0)).run(operation)

        assert operation.await_count == 1


class TestCancellation:
    """Tests for the cancellation signal and task cancellation."""

    @pytest.mark.asyncio
    async def test_already_cancelled(self, no_delay_policy: RetryPolicy) -> None:
        event = Event()
        event.set()
        operation = AsyncMock(return_value="ok")

        with pytest.raises(GenerationCancelledError):
            await RetryOrchestrator(no_delay_policy).run(operation, cancel_event=event)

        operation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_event_interrupts_backoff(self) -> None:
        policy = RetryPolicy(max_attempts=3, initial_delay=30.0, factor=1.0, max_delay=30.0)
        event = Event()
        operation = AsyncMock(side_effect=AiNetworkError())

        async def cancel_soon() -> None:
            await sleep(0.05)
            event.set()

        canceller = create_task(cancel_soon())
        start = perf_counter()
        with pytest.raises(GenerationCancelledError):
            await RetryOrchestrator(policy).run(operation, cancel_event=event)
        await canceller

        assert perf_counter() - start < 5
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self) -> None:
        policy = RetryPolicy(max_attempts=3, initial_delay=30.0, factor=1.0, max_delay=30.0)
        operation = AsyncMock(side_effect=AiNetworkError())

        task = create_task(RetryOrchestrator(policy).run(operation))
        await sleep(0.05)
        task.cancel()

        with pytest.raises(CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_cancellable_sleep_times_out_normally(self) -> None:
        await cancellable_sleep(0.01, Event())
        await cancellable_sleep(0)

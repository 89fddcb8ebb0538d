# app/services/itinerary.py

"""
Itinerary generation pipeline.

One request flows through:

    normalize_request -> plan_chunks
        -> per chunk, sequentially and under the retry policy:
           day_plan_prompt -> model.invoke -> parse_json
           -> validate_day_plans -> validate_chunk_dates
        -> generate_tips -> assemble

``ItineraryGenerator`` is built once at startup around a model client and
shared by reference. It keeps no per-request state, so independent requests
may run on it concurrently.
"""

from asyncio import Event
from collections.abc import Awaitable, Callable
from logging import getLogger
from time import perf_counter
from typing import Any, TypeVar
from uuid import uuid4

from app.clients.protocols import ModelClientProtocol
from app.managers.retry_orchestrator import (
    OnRetry,
    RetryOrchestrator,
    RetryPolicy,
    raise_if_cancelled,
)
from app.monitoring.logging import bind_generation_context, get_logger, unbind_generation_context
from app.schemas.ai.itinerary import (
    ActivitySuggestions,
    DayPlanBatch,
    DestinationInsights,
    GenerationRequest,
    GenerationResult,
)
from app.services.assembler import assemble
from app.services.chunking import ChunkContext, plan_chunks
from app.services.prompts import (
    activity_suggestions_prompt,
    day_plan_prompt,
    insights_prompt,
    tips_prompt,
)
from app.services.response_cleaner import parse_json
from app.services.response_validator import (
    validate_activity_suggestions,
    validate_chunk_dates,
    validate_day_plans,
    validate_insights,
    validate_tips,
)
from app.utils.helpers import file_logger, time_taken

logger = file_logger(getLogger(__name__))
events = get_logger(__name__)

T = TypeVar("T")


def log_retry(error: BaseException, attempt: int, delay: float) -> None:
    """Default retry observer: one structured event per failed attempt."""
    events.warning(
        "ai_retry",
        attempt=attempt,
        delay=round(delay, 2),
        error_type=type(error).__name__,
        error=str(error),
    )


class ItineraryGenerator:
    """
    Drive the model through chunked day-plan generation and auxiliary calls.

    Attributes:
        model: Text-in/text-out model client.
        generation_policy: Retry policy for day-plan chunks.
        auxiliary_policy: Retry policy for tips, insights and suggestions.
    """

    def __init__(
        self,
        model_client: ModelClientProtocol,
        generation_policy: RetryPolicy | None = None,
        auxiliary_policy: RetryPolicy | None = None,
        on_retry: OnRetry | None = log_retry,
    ) -> None:
        self.model = model_client
        self.generation_policy = generation_policy or RetryPolicy.generation()
        self.auxiliary_policy = auxiliary_policy or RetryPolicy.auxiliary()
        self._on_retry = on_retry

    def _orchestrator(self, policy: RetryPolicy, name: str) -> RetryOrchestrator:
        return RetryOrchestrator(policy=policy, on_retry=self._on_retry, name=name)

    async def _ask(
        self,
        prompt: str,
        validate: Callable[[Any], T],
    ) -> T:
        """One attempt: invoke the model, extract JSON and validate it."""
        text = await self.model.invoke(prompt)
        return validate(parse_json(text))

    async def _run(
        self,
        policy: RetryPolicy,
        name: str,
        operation: Callable[[], Awaitable[T]],
        cancel_event: Event | None,
    ) -> T:
        return await self._orchestrator(policy, name).run(operation, cancel_event=cancel_event)

    async def generate_chunk(
        self,
        chunk: ChunkContext,
        cancel_event: Event | None = None,
    ) -> DayPlanBatch:
        """
        Generate and validate the day plans of one chunk.

        Raises:
            SchemaValidationError: Immediately, on the first invalid response.
            TransientServiceError: When every attempt failed transiently.
            MalformedResponseError: When every attempt returned unparseable text.
            GenerationCancelledError: If ``cancel_event`` is set.
        """
        prompt = day_plan_prompt(chunk)

        def validate(value: Any) -> DayPlanBatch:  # noqa: ANN401
            batch = validate_day_plans(value, chunk.currency)
            validate_chunk_dates(batch.day_plans, chunk.start_date, chunk.end_date)
            return batch

        batch = await self._run(
            self.generation_policy,
            f"chunk {chunk.index}/{chunk.total}",
            lambda: self._ask(prompt, validate),
            cancel_event,
        )
        events.info(
            "chunk_generated",
            chunk=chunk.index,
            total=chunk.total,
            days=len(batch.day_plans),
        )
        return batch

    async def generate_tips(
        self,
        request: GenerationRequest,
        cancel_event: Event | None = None,
    ) -> list[str]:
        """Generate practical travel tips for the request's destination."""
        prompt = tips_prompt(request)
        return await self._run(
            self.auxiliary_policy,
            "tips",
            lambda: self._ask(prompt, validate_tips),
            cancel_event,
        )

    async def generate_itinerary(
        self,
        request: GenerationRequest,
        cancel_event: Event | None = None,
    ) -> GenerationResult:
        """
        Generate a complete itinerary for a normalized request.

        Chunks are generated strictly one after another; the next chunk's
        model call starts only after the previous chunk validated.

        Args:
            request: Normalized generation request.
            cancel_event: Optional signal; once set, no further model call or
                backoff wait starts.

        Returns:
            The assembled GenerationResult.

        Raises:
            AiError: Any pipeline error, unchanged.
        """
        start_time = perf_counter()
        chunks = plan_chunks(request)
        destination = request.destination
        bind_generation_context(
            uuid4().hex,
            city=destination.city,
            days=request.trip_days,
        )
        events.info(
            "generation_started",
            country=destination.country,
            chunks=len(chunks),
            daily_budget=chunks[0].daily_budget,
            currency=request.budget.currency,
        )

        try:
            results: list[DayPlanBatch] = []
            for chunk in chunks:
                raise_if_cancelled(cancel_event)
                results.append(await self.generate_chunk(chunk, cancel_event))

            raise_if_cancelled(cancel_event)
            tips = await self.generate_tips(request, cancel_event)
            result = assemble(request, results, [tips])
        except Exception as e:
            events.error("generation_failed", error_type=type(e).__name__, error=str(e))
            raise
        finally:
            unbind_generation_context("city", "days")

        logger.info(
            f"Itinerary for {destination.city} generated in {time_taken(start_time)}: "
            f"{len(result.day_plans)} days, {result.budget.actual} {result.budget.currency}",
        )
        return result

    async def get_destination_insights(
        self,
        city: str,
        country: str,
        cancel_event: Event | None = None,
    ) -> DestinationInsights:
        """Get best time to visit, customs, transportation, safety and experiences."""
        prompt = insights_prompt(city, country)
        return await self._run(
            self.auxiliary_policy,
            f"insights {city}",
            lambda: self._ask(prompt, validate_insights),
            cancel_event,
        )

    async def suggest_activities(
        self,
        preferences: dict[str, Any],
        location: str,
        cancel_event: Event | None = None,
    ) -> ActivitySuggestions:
        """Suggest activities at ``location`` matching free-form preferences."""
        prompt = activity_suggestions_prompt(preferences, location)
        return await self._run(
            self.auxiliary_policy,
            f"suggestions {location}",
            lambda: self._ask(prompt, validate_activity_suggestions),
            cancel_event,
        )

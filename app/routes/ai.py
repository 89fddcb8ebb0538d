from asyncio import CancelledError, Event, create_task, sleep
from contextlib import suppress
from logging import getLogger
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import ORJSONResponse

from app.schemas.ai.itinerary import (
    ActivitySuggestions,
    DestinationInsights,
    GenerationResult,
    SuggestActivitiesRequest,
)
from app.services.itinerary import ItineraryGenerator
from app.services.normalizer import normalize_request
from app.utils.helpers import file_logger, host

logger = file_logger(getLogger(__name__))

router = APIRouter(prefix="/ai", tags=["ai"])

DISCONNECT_POLL_INTERVAL = 0.5


def get_itinerary_generator(request: Request) -> ItineraryGenerator:
    return request.app.state.itinerary_generator


GeneratorDep = Annotated[ItineraryGenerator, Depends(get_itinerary_generator)]


async def watch_disconnect(request: Request, cancel_event: Event) -> None:
    """Set ``cancel_event`` once the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info(f"Client {host(request)} disconnected, cancelling generation")
            cancel_event.set()
            return
        await sleep(DISCONNECT_POLL_INTERVAL)


@router.post(
    "/itinerary",
    summary="Generate an itinerary",
    response_model=GenerationResult,
    response_class=ORJSONResponse,
)
async def create_itinerary(
    request: Request,
    generator: GeneratorDep,
    payload: Annotated[
        dict[str, Any],
        Body(
            examples=[
                {
                    "destination": {"city": "Paris", "country": "France"},
                    "startDate": "2025-06-01",
                    "endDate": "2025-06-05",
                    "travelStyle": "cultural",
                    "budget": {"planned": 800, "currency": "USD"},
                    "preferences": {"interests": ["museums", "food"]},
                },
            ],
        ),
    ],
) -> ORJSONResponse:
    """
    Generate a day-by-day itinerary.

    Missing or invalid request fields are replaced by defaults and the trip is
    clamped to 4 days. Generation stops when the client disconnects.
    """
    generation_request = normalize_request(payload)
    cancel_event = Event()
    watcher = create_task(watch_disconnect(request, cancel_event))
    try:
        result = await generator.generate_itinerary(generation_request, cancel_event)
    finally:
        cancel_event.set()
        watcher.cancel()
        with suppress(CancelledError):
            await watcher

    return ORJSONResponse(result.model_dump(mode="json", by_alias=True))


@router.get(
    "/insights",
    summary="Get destination insights",
    response_model=DestinationInsights,
    response_class=ORJSONResponse,
)
async def destination_insights(
    generator: GeneratorDep,
    city: Annotated[str, Query(min_length=1, max_length=100)],
    country: Annotated[str, Query(min_length=1, max_length=100)],
) -> ORJSONResponse:
    """Get travel insights for a destination."""
    insights = await generator.get_destination_insights(city, country)
    return ORJSONResponse(insights.model_dump(by_alias=True))


@router.post(
    "/suggest-activities",
    summary="Suggest activities",
    response_model=ActivitySuggestions,
    response_class=ORJSONResponse,
)
async def suggest_activities(
    generator: GeneratorDep,
    suggestion: SuggestActivitiesRequest,
) -> ORJSONResponse:
    """Suggest activities for a location matching the given preferences."""
    suggestions = await generator.suggest_activities(suggestion.preferences, suggestion.location)
    return ORJSONResponse(suggestions.model_dump(by_alias=True))

# app/schemas/ai/__init__.py

from app.schemas.ai.itinerary import (
    Activity,
    ActivitySuggestions,
    ActivityType,
    Budget,
    Cost,
    DayPlan,
    DayPlanBatch,
    Destination,
    DestinationInsights,
    GenerationRequest,
    GenerationResult,
    ItineraryBudget,
    Location,
    Preferences,
    SuggestActivitiesRequest,
    SuggestedActivity,
    TipList,
    TravelStyle,
)

__all__ = [
    "Activity",
    "ActivitySuggestions",
    "ActivityType",
    "Budget",
    "Cost",
    "DayPlan",
    "DayPlanBatch",
    "Destination",
    "DestinationInsights",
    "GenerationRequest",
    "GenerationResult",
    "ItineraryBudget",
    "Location",
    "Preferences",
    "SuggestActivitiesRequest",
    "SuggestedActivity",
    "TipList",
    "TravelStyle",
]

# app/services/prompts.py

"""
Prompt construction for the itinerary model calls.

Every function here is pure: it renders its arguments into instruction text
and performs no I/O.
"""

from typing import Any

from orjson import OPT_INDENT_2, dumps

from app.configs.settings import (
    ACTIVITY_TYPES,
    MAX_ACTIVITIES_PER_DAY,
    MAX_DESCRIPTION_LENGTH,
    MAX_INSIGHT_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_SUGGESTION_DESCRIPTION_LENGTH,
    MAX_TIP_LENGTH,
    MAX_TITLE_LENGTH,
)
from app.schemas.ai.itinerary import GenerationRequest, Preferences
from app.services.chunking import ChunkContext

JSON_ONLY = """
    - Respond with ONLY valid JSON that can be parsed directly
    - NO markdown, NO code fences, NO text before or after the JSON
    """


def _pretty(value: Any) -> str:  # noqa: ANN401
    return dumps(value, option=OPT_INDENT_2).decode()


def day_plan_example(currency: str, day: str) -> dict[str, Any]:
    """A complete, valid one-day response used as the schema example."""
    return {
        "dayPlans": [
            {
                "date": day,
                "activities": [
                    {
                        "type": "Cultural",
                        "title": "Visit Senso-ji Temple",
                        "description": (
                            "Explore Tokyo's oldest Buddhist temple, "
                            "known for its iconic Kaminarimon Gate"
                        ),
                        "startTime": "09:00",
                        "endTime": "11:00",
                        "cost": {"amount": 0, "currency": currency},
                        "location": {
                            "name": "Senso-ji Temple",
                            "address": "2-3-1 Asakusa, Taito City, Tokyo 111-0032, Japan",
                            "coordinates": [139.7968, 35.7141],
                        },
                        "notes": "Free admission. Arrive early to avoid crowds",
                    },
                ],
                "notes": "Start the day early to avoid crowds",
            },
        ],
    }


def preferences_text(preferences: Preferences) -> str:
    if preferences.is_empty():
        return "No specific preferences"
    return _pretty(preferences.model_dump(by_alias=True))


def day_plan_prompt(chunk: ChunkContext) -> str:
    """
    Create the prompt for one chunk of day plans.

    Args:
        chunk: The chunk to plan, with its own date range and daily budget.

    Returns:
        A formatted prompt string for the AI model.
    """
    request = chunk.request
    destination = request.destination
    currency = chunk.currency
    budget = chunk.daily_budget
    first_day = chunk.start_date.isoformat()
    dates = ", ".join(day.isoformat() for day in chunk.dates)
    types = "\n".join(f"    - {activity_type}" for activity_type in ACTIVITY_TYPES)

    return f"""
    Generate a travel itinerary for part {chunk.index} of {chunk.total} of a trip
    to {destination.city}, {destination.country}.

    <trip_context>
    Dates: from {first_day} to {chunk.end_date.isoformat()}
    Style: {request.travel_style}
    Daily Budget: {currency} {budget}
    Preferences: {preferences_text(request.preferences)}
    </trip_context>

    <formatting_rules>
    1. Return a single JSON object with a "dayPlans" array
    2. Return exactly one day plan per date, for these dates only: {dates}
    3. Dates MUST be in YYYY-MM-DD format (e.g. {first_day})
    4. Times MUST be in 24-hour HH:MM format and endTime MUST be after startTime
    5. Activities within a day MUST NOT overlap and no activity may last over 8 hours
    6. Cost amounts MUST be numbers (not strings); use 0 for free activities
    7. Every cost currency MUST be "{currency}"
    8. Location coordinates MUST be a [longitude, latitude] array of two numbers,
       longitude between -180 and 180, latitude between -90 and 90
    9. title at most {MAX_TITLE_LENGTH} characters, description at most
       {MAX_DESCRIPTION_LENGTH}, notes at most {MAX_NOTES_LENGTH}
    10. Every activity MUST include type, title, description, startTime, endTime,
        cost, location and notes; every location MUST include name, address and
        coordinates
    </formatting_rules>

    <activity_types>
    Use one of these exactly:
{types}
    </activity_types>

    <activity_guidelines>
    - Include 3-4 activities per day (never more than {MAX_ACTIVITIES_PER_DAY})
    - Mix different activity types and allow travel time between them
    - Keep the total cost of each day within {budget} {currency}
    - Use real places with accurate coordinates
    - Keep each day geographically feasible
    </activity_guidelines>

    <example>
{_pretty(day_plan_example(currency, first_day))}
    </example>

    <output_format>
    {JSON_ONLY}
    </output_format>
    """


def tips_prompt(request: GenerationRequest) -> str:
    """Create the prompt for practical travel tips."""
    destination = request.destination
    budget = request.budget

    return f"""
    Generate 5-7 practical travel tips for {destination.city}, {destination.country}.

    <trip_context>
    Travel style: {request.travel_style}
    Budget: {budget.currency} {budget.planned:g}
    </trip_context>

    <rules>
    - Respond with a JSON array of strings
    - Each tip at most {MAX_TIP_LENGTH} characters
    - Focus on practical, actionable advice
    </rules>

    <example>
    ["First practical tip", "Second practical tip", "Third practical tip"]
    </example>

    <output_format>
    {JSON_ONLY}
    </output_format>
    """


def insights_prompt(city: str, country: str) -> str:
    """Create the prompt for destination insights."""
    structure = {
        "bestTimeToVisit": "When to visit",
        "localCustoms": "Customs and etiquette",
        "transportation": "Getting around",
        "safety": "Safety tips",
        "localExperiences": "Must-try experiences",
    }
    return f"""
    Provide travel insights for {city}, {country}.

    <rules>
    - Respond with a JSON object containing exactly the keys shown below
    - Each value at most {MAX_INSIGHT_LENGTH} characters
    - Focus on current, accurate information
    </rules>

    <structure>
{_pretty(structure)}
    </structure>

    <output_format>
    {JSON_ONLY}
    </output_format>
    """


def activity_suggestions_prompt(preferences: dict[str, Any], location: str) -> str:
    """Create the prompt for activity suggestions matching free-form preferences."""
    structure = {
        "activities": [
            {
                "name": "Activity name",
                "description": "Brief description",
                "duration": "Estimated duration",
                "cost": "Estimated cost",
                "bestTime": "Best time to do this",
            },
        ],
    }
    return f"""
    Suggest activities in {location} matching these preferences: {dumps(preferences).decode()}.

    <rules>
    - Respond with a JSON object with an "activities" array
    - Keep descriptions under {MAX_SUGGESTION_DESCRIPTION_LENGTH} characters
    - Include specific details
    </rules>

    <structure>
{_pretty(structure)}
    </structure>

    <output_format>
    {JSON_ONLY}
    </output_format>
    """

# app/schemas/ai/itinerary.py

"""
Schemas for AI-powered itinerary generation requests and results.

The request models describe an already normalized generation request. The
day-plan, tips and insight models validate untrusted model output: field
constraints cover structure and lengths, validators cover the cross-field
invariants (time ordering, currency agreement, coordinate ranges and
non-overlapping activities). Validation context carries the request currency:

    DayPlanBatch.model_validate(data, context={"currency": "USD"})
"""

from datetime import date
from enum import StrEnum
from math import fsum
from re import compile as re_compile
from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StringConstraints,
    ValidationInfo,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from app.configs.settings import (
    DEFAULT_BUDGET,
    DEFAULT_COORDINATES,
    DEFAULT_CURRENCY,
    MAX_ACTIVITIES_PER_DAY,
    MAX_ACTIVITY_MINUTES,
    MAX_DESCRIPTION_LENGTH,
    MAX_INSIGHT_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_SUGGESTION_DESCRIPTION_LENGTH,
    MAX_TIP_LENGTH,
    MAX_TIPS,
    MAX_TITLE_LENGTH,
    MAX_TRIP_DAYS,
    MIN_ACTIVITIES_PER_DAY,
)

TIME_PATTERN = re_compile(r"^\d{2}:\d{2}$")
DATE_PATTERN = re_compile(r"^\d{4}-\d{2}-\d{2}$")

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TipText = Annotated[str, StringConstraints(min_length=1, max_length=MAX_TIP_LENGTH)]
InsightText = Annotated[str, StringConstraints(min_length=1, max_length=MAX_INSIGHT_LENGTH)]


def to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes after midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TravelStyle(StrEnum):
    LUXURY = "luxury"
    BUDGET = "budget"
    ADVENTURE = "adventure"
    CULTURAL = "cultural"
    RELAXATION = "relaxation"
    BALANCED = "balanced"


class ActivityType(StrEnum):
    CULTURAL = "Cultural"
    LOCAL = "Local"
    RELAXATION = "Relaxation"
    TRANSPORT = "Transport"
    DINING = "Dining"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    SIGHTSEEING = "Sightseeing"


# --- Request Models ---


class Destination(CamelModel):
    city: str
    country: str
    coordinates: tuple[float, float] = DEFAULT_COORDINATES


class Budget(CamelModel):
    planned: float = Field(DEFAULT_BUDGET, ge=0)
    currency: str = Field(DEFAULT_CURRENCY, pattern=r"^[A-Z]{3}$")


class Preferences(CamelModel):
    interests: list[str] = Field(default_factory=list)
    exclude_types: list[str] = Field(default_factory=list)
    accessibility: list[str] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(
            (self.interests, self.exclude_types, self.accessibility, self.dietary_restrictions),
        )


class GenerationRequest(CamelModel):
    """
    A normalized itinerary generation request.

    Build instances with ``app.services.normalizer.normalize_request`` when the
    input is untrusted; the validator here only guards the invariants.
    """

    destination: Destination
    start_date: date
    end_date: date
    travel_style: TravelStyle = TravelStyle.BALANCED
    budget: Budget = Field(default_factory=Budget)
    preferences: Preferences = Field(default_factory=Preferences)

    @model_validator(mode="after")
    def validate_date_range(self) -> Self:
        if self.end_date < self.start_date:
            msg = "endDate must not be before startDate"
            raise ValueError(msg)
        if (self.end_date - self.start_date).days > MAX_TRIP_DAYS:
            msg = f"Itinerary duration cannot exceed {MAX_TRIP_DAYS} days"
            raise ValueError(msg)
        return self

    @property
    def trip_days(self) -> int:
        """Number of itinerary days; a same-day trip still plans one day."""
        return min(MAX_TRIP_DAYS, max(1, (self.end_date - self.start_date).days))


# --- Model Output Models ---


class Cost(CamelModel):
    amount: float = Field(ge=0, strict=True)
    currency: NonEmptyStr

    @field_validator("currency")
    @classmethod
    def currency_matches_request(cls, v: str, info: ValidationInfo) -> str:
        expected = (info.context or {}).get("currency")
        if expected and v != expected:
            raise PydanticCustomError(
                "currency_mismatch",
                "Currency must be {expected}, got {actual}",
                {"expected": expected, "actual": v},
            )
        return v


class Location(CamelModel):
    name: NonEmptyStr
    address: NonEmptyStr
    coordinates: tuple[StrictFloat, StrictFloat]

    @field_validator("coordinates")
    @classmethod
    def validate_ranges(cls, v: tuple[float, float]) -> tuple[float, float]:
        longitude, latitude = v
        if not -180 <= longitude <= 180:
            raise PydanticCustomError(
                "longitude_out_of_range",
                "Longitude must be between -180 and 180, got {actual}",
                {"expected": "[-180, 180]", "actual": longitude},
            )
        if not -90 <= latitude <= 90:
            raise PydanticCustomError(
                "latitude_out_of_range",
                "Latitude must be between -90 and 90, got {actual}",
                {"expected": "[-90, 90]", "actual": latitude},
            )
        return v


class Activity(CamelModel):
    type: ActivityType
    title: Annotated[str, StringConstraints(min_length=1, max_length=MAX_TITLE_LENGTH)]
    description: Annotated[str, StringConstraints(min_length=1, max_length=MAX_DESCRIPTION_LENGTH)]
    start_time: str
    end_time: str
    cost: Cost
    location: Location
    notes: str = Field(max_length=MAX_NOTES_LENGTH)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not TIME_PATTERN.match(v):
            raise PydanticCustomError(
                "time_format",
                "Time must be HH:MM, got {actual}",
                {"expected": "HH:MM", "actual": v},
            )
        hours, minutes = (int(part) for part in v.split(":"))
        if hours > 23 or minutes > 59:
            raise PydanticCustomError(
                "time_range",
                "Hours must be 0-23 and minutes 0-59, got {actual}",
                {"expected": "00:00-23:59", "actual": v},
            )
        return v

    @model_validator(mode="after")
    def validate_timing(self) -> Self:
        duration = self.end_minutes - self.start_minutes
        if duration <= 0:
            raise PydanticCustomError(
                "time_order",
                "endTime {actual} must be after startTime {expected}",
                {"field": "endTime", "expected": self.start_time, "actual": self.end_time},
            )
        if duration > MAX_ACTIVITY_MINUTES:
            raise PydanticCustomError(
                "duration_exceeded",
                "Activity lasts {actual} minutes, maximum is {expected}",
                {"field": "endTime", "expected": MAX_ACTIVITY_MINUTES, "actual": duration},
            )
        return self

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)


class DayPlan(CamelModel):
    day: date = Field(alias="date")
    activities: list[Activity] = Field(
        min_length=MIN_ACTIVITIES_PER_DAY,
        max_length=MAX_ACTIVITIES_PER_DAY,
    )
    notes: str = Field(max_length=MAX_NOTES_LENGTH)

    @field_validator("day", mode="before")
    @classmethod
    def validate_date_format(cls, v: Any) -> Any:  # noqa: ANN401
        if isinstance(v, date):
            return v
        if not isinstance(v, str) or not DATE_PATTERN.match(v):
            raise PydanticCustomError(
                "date_format",
                "Date must be YYYY-MM-DD, got {actual}",
                {"expected": "YYYY-MM-DD", "actual": v},
            )
        return v

    @field_validator("activities")
    @classmethod
    def validate_sequence(cls, v: list[Activity]) -> list[Activity]:
        """Order activities by start time and reject overlapping time windows."""
        ordered = sorted(enumerate(v), key=lambda item: item[1].start_minutes)
        previous: Activity | None = None
        for index, activity in ordered:
            if previous is not None and activity.start_minutes < previous.end_minutes:
                raise PydanticCustomError(
                    "time_overlap",
                    "Activity starts at {actual} before the previous activity ends at {expected}",
                    {
                        "activity_index": index,
                        "field": "startTime",
                        "expected": previous.end_time,
                        "actual": activity.start_time,
                    },
                )
            previous = activity
        return [activity for _, activity in ordered]

    @property
    def total_cost(self) -> float:
        return fsum(activity.cost.amount for activity in self.activities)


class DayPlanBatch(CamelModel):
    """Top-level object returned by the model for one chunk."""

    day_plans: list[DayPlan] = Field(min_length=1)


TipList = Annotated[list[TipText], Field(min_length=1, max_length=MAX_TIPS)]


class DestinationInsights(CamelModel):
    best_time_to_visit: InsightText
    local_customs: InsightText
    transportation: InsightText
    safety: InsightText
    local_experiences: InsightText


class SuggestedActivity(CamelModel):
    name: NonEmptyStr
    description: Annotated[
        str,
        StringConstraints(min_length=1, max_length=MAX_SUGGESTION_DESCRIPTION_LENGTH),
    ]
    duration: NonEmptyStr | StrictFloat
    cost: NonEmptyStr | StrictFloat
    best_time: NonEmptyStr


class ActivitySuggestions(CamelModel):
    activities: list[SuggestedActivity] = Field(min_length=1)


class SuggestActivitiesRequest(CamelModel):
    location: NonEmptyStr
    preferences: dict[str, Any] = Field(..., examples=[{"interests": ["museums", "food"]}])


# --- Response Models ---


class ItineraryBudget(CamelModel):
    planned: float
    currency: str
    actual: float


class GenerationResult(CamelModel):
    """
    Assembled itinerary.

    ``budget.actual`` is derived from the activity costs on every access and
    is never stored.
    """

    day_plans: list[DayPlan]
    tips: list[str]
    planned_budget: Budget = Field(exclude=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def budget(self) -> ItineraryBudget:
        return ItineraryBudget(
            planned=self.planned_budget.planned,
            currency=self.planned_budget.currency,
            actual=self.total_cost,
        )

    @property
    def total_cost(self) -> float:
        return round(fsum(day.total_cost for day in self.day_plans), 2)

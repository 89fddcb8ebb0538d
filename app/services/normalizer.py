# app/services/normalizer.py

"""
Request normalization for itinerary generation.

``normalize_request`` turns a raw, possibly partial or mistyped request
document into a well-formed ``GenerationRequest``. It never raises: every
missing or unusable field falls back to a default. Keys are accepted in
camelCase (the API format) or snake_case.
"""

from collections.abc import Mapping
from datetime import UTC, date, datetime, timedelta
from math import isfinite
from re import compile as re_compile
from re import sub
from typing import Any

from app.configs.settings import (
    DEFAULT_BUDGET,
    DEFAULT_CITY,
    DEFAULT_COORDINATES,
    DEFAULT_COUNTRY,
    DEFAULT_CURRENCY,
    MAX_PREFERENCE_LENGTH,
    MAX_TRIP_DAYS,
)
from app.schemas.ai.itinerary import (
    Budget,
    Destination,
    GenerationRequest,
    Preferences,
    TravelStyle,
)

CURRENCY_PATTERN = re_compile(r"^[A-Z]{3}$")
MAX_PLACE_NAME_LENGTH = 100
# Timestamps above this are taken as milliseconds
MILLISECOND_THRESHOLD = 1e11
# Latest start date that still leaves room for the longest trip
LATEST_START = date.max - timedelta(days=MAX_TRIP_DAYS)


def _pick(data: Mapping[str, Any], camel: str, snake: str | None = None) -> Any:  # noqa: ANN401
    if camel in data:
        return data[camel]
    return data.get(snake) if snake else None


def _mapping(value: Any) -> Mapping[str, Any]:  # noqa: ANN401
    return value if isinstance(value, Mapping) else {}


def sanitize_text(value: Any, max_length: int) -> str | None:  # noqa: ANN401
    """Strip markup-ish characters and whitespace; None when nothing usable is left."""
    if not isinstance(value, str):
        return None
    sanitized = sub(r"[<>\"']", "", value.strip())[:max_length].strip()
    return sanitized or None


def coerce_number(value: Any) -> float | None:  # noqa: ANN401
    """Coerce ints, floats and numeric strings like ``"US$ 1,000"``; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        cleaned = sub(r"[^\d.\-]", "", value)
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if isfinite(number) else None


def coerce_date(value: Any) -> date | None:  # noqa: ANN401
    """Coerce dates, datetimes, ISO-8601 strings and epoch timestamps to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    number = coerce_number(value) if isinstance(value, int | float) else None
    if number is not None:
        seconds = number / 1000 if abs(number) > MILLISECOND_THRESHOLD else number
        try:
            return datetime.fromtimestamp(seconds, tz=UTC).date()
        except (OverflowError, OSError, ValueError):
            return None
    return None


def _coordinates(value: Any) -> tuple[float, float]:  # noqa: ANN401
    if not isinstance(value, list | tuple) or len(value) != 2:
        return DEFAULT_COORDINATES
    longitude, latitude = (coerce_number(item) for item in value)
    if longitude is None or latitude is None:
        return DEFAULT_COORDINATES
    if not (-180 <= longitude <= 180 and -90 <= latitude <= 90):
        return DEFAULT_COORDINATES
    return (longitude, latitude)


def _destination(value: Any) -> Destination:  # noqa: ANN401
    data = _mapping(value)
    return Destination(
        city=sanitize_text(data.get("city"), MAX_PLACE_NAME_LENGTH) or DEFAULT_CITY,
        country=sanitize_text(data.get("country"), MAX_PLACE_NAME_LENGTH) or DEFAULT_COUNTRY,
        coordinates=_coordinates(data.get("coordinates")),
    )


def _budget(value: Any) -> Budget:  # noqa: ANN401
    data = _mapping(value)
    planned = coerce_number(data.get("planned"))
    if planned is None or planned <= 0:
        planned = DEFAULT_BUDGET

    currency = data.get("currency")
    currency = currency.strip().upper() if isinstance(currency, str) else ""
    if not CURRENCY_PATTERN.match(currency):
        currency = DEFAULT_CURRENCY

    return Budget(planned=planned, currency=currency)


def _travel_style(value: Any) -> TravelStyle:  # noqa: ANN401
    if isinstance(value, str):
        try:
            return TravelStyle(value.strip().lower())
        except ValueError:
            pass
    return TravelStyle.BALANCED


def _string_list(value: Any) -> list[str]:  # noqa: ANN401
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list | tuple):
        return []
    items = (sanitize_text(item, MAX_PREFERENCE_LENGTH) for item in value)
    return [item for item in items if item]


def _preferences(value: Any) -> Preferences:  # noqa: ANN401
    data = _mapping(value)
    return Preferences(
        interests=_string_list(data.get("interests")),
        exclude_types=_string_list(_pick(data, "excludeTypes", "exclude_types")),
        accessibility=_string_list(data.get("accessibility")),
        dietary_restrictions=_string_list(
            _pick(data, "dietaryRestrictions", "dietary_restrictions"),
        ),
    )


def clamp_dates(start: date, end: date | None) -> tuple[date, date]:
    """
    Repair the date range: end defaults to the next day and spans at most MAX_TRIP_DAYS.

    Starts too close to ``date.max`` to fit a full trip are moved back to LATEST_START.
    """
    start = min(start, LATEST_START)
    if end is None or end < start:
        end = start + timedelta(days=1)
    if (end - start).days > MAX_TRIP_DAYS:
        end = start + timedelta(days=MAX_TRIP_DAYS)
    return start, end


def normalize_request(raw: Mapping[str, Any] | None) -> GenerationRequest:
    """
    Sanitize and default a raw generation request.

    Args:
        raw: Request document, possibly partial or mistyped.

    Returns:
        A GenerationRequest whose trip spans at most MAX_TRIP_DAYS days.
    """
    data = _mapping(raw)
    start = coerce_date(_pick(data, "startDate", "start_date")) or date.today()
    start, end = clamp_dates(start, coerce_date(_pick(data, "endDate", "end_date")))

    return GenerationRequest(
        destination=_destination(data.get("destination")),
        start_date=start,
        end_date=end,
        travel_style=_travel_style(_pick(data, "travelStyle", "travel_style")),
        budget=_budget(data.get("budget")),
        preferences=_preferences(data.get("preferences")),
    )

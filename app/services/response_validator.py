# app/services/response_validator.py

"""
Schema and invariant validation of parsed model output.

Pydantic models in ``app.schemas.ai.itinerary`` do the checking; this module
runs them and converts the first violation into a ``SchemaValidationError``
naming the offending field, e.g. ``dayPlans[0].activities[1].endTime``.
"""

from collections.abc import Sequence
from datetime import date
from logging import getLogger
from typing import Any

from pydantic import TypeAdapter, ValidationError

from app.errors import SchemaValidationError
from app.errors.validation import format_validation_errors
from app.schemas.ai.itinerary import (
    ActivitySuggestions,
    DayPlan,
    DayPlanBatch,
    DestinationInsights,
    TipList,
)
from app.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

tips_adapter: TypeAdapter[list[str]] = TypeAdapter(TipList)

# ctx keys that describe where the error is, not what was expected
LOCATION_KEYS = ("activity_index", "field")


def format_field(loc: Sequence[str | int], root: str | None = None) -> str:
    """Render a pydantic error location as ``dayPlans[0].activities[1].endTime``."""
    field = root or ""
    for part in loc:
        if isinstance(part, int):
            field += f"[{part}]"
        else:
            field = f"{field}.{part}" if field else part
    return field or "response"


def _index_after(loc: Sequence[str | int], key: str) -> int | None:
    for position, part in enumerate(loc[:-1]):
        if part == key and isinstance(loc[position + 1], int):
            return loc[position + 1]
    return None


def _expected(ctx: dict[str, Any]) -> Any:  # noqa: ANN401
    if "expected" in ctx:
        return ctx["expected"]
    rest = [value for key, value in ctx.items() if key not in LOCATION_KEYS]
    return rest[0] if len(rest) == 1 else None


def _actual(error: dict[str, Any]) -> Any:  # noqa: ANN401
    ctx = error.get("ctx") or {}
    if "actual" in ctx:
        return ctx["actual"]
    value = error.get("input")
    return value if isinstance(value, str | int | float | bool) else None


def to_schema_error(exc: ValidationError, root: str | None = None) -> SchemaValidationError:
    """
    Convert a pydantic ValidationError into a SchemaValidationError.

    The first error determines ``field``, ``reason``, the day and activity
    indexes, ``expected`` and ``actual``; every error is kept in ``errors``.

    Args:
        exc: The validation error raised by a schema model.
        root: Name prefixed to the location, for top-level lists such as tips.

    Returns:
        The equivalent SchemaValidationError.
    """
    errors = exc.errors(include_url=False)
    first = errors[0]
    ctx = first.get("ctx") or {}

    loc: list[str | int] = list(first.get("loc", ()))
    if "activity_index" in ctx:
        loc.append(ctx["activity_index"])
    if "field" in ctx:
        loc.append(ctx["field"])

    return SchemaValidationError(
        reason=first["msg"],
        field=format_field(loc, root),
        day_index=_index_after(loc, "dayPlans"),
        activity_index=_index_after(loc, "activities"),
        expected=_expected(ctx),
        actual=_actual(first),
        errors=format_validation_errors(errors),
    )


def validate_day_plans(value: Any, currency: str) -> DayPlanBatch:  # noqa: ANN401
    """
    Validate a parsed day-plan response.

    Args:
        value: Parsed JSON returned by the model.
        currency: The request currency every activity cost must use.

    Returns:
        The validated, immutable day plans with activities sorted by start time.

    Raises:
        SchemaValidationError: On the first structural or semantic violation.
    """
    try:
        return DayPlanBatch.model_validate(value, context={"currency": currency})
    except ValidationError as e:
        error = to_schema_error(e)
        logger.debug(f"Day plan validation failed: {error.detail}")
        raise error from e


def validate_chunk_dates(day_plans: Sequence[DayPlan], start: date, end: date) -> None:
    """
    Check that day plans fall inside ``[start, end]`` in strictly ascending order.

    Raises:
        SchemaValidationError: Naming the first misplaced ``dayPlans[i].date``.
    """
    previous: date | None = None
    for index, plan in enumerate(day_plans):
        field = f"dayPlans[{index}].date"
        if not start <= plan.day <= end:
            raise SchemaValidationError(
                reason=f"Date {plan.day} is outside the requested range",
                field=field,
                day_index=index,
                expected=f"{start.isoformat()}..{end.isoformat()}",
                actual=plan.day.isoformat(),
            )
        if previous is not None and plan.day <= previous:
            raise SchemaValidationError(
                reason=f"Date {plan.day} does not follow {previous}",
                field=field,
                day_index=index,
                expected=f"after {previous.isoformat()}",
                actual=plan.day.isoformat(),
            )
        previous = plan.day


def validate_tips(value: Any) -> list[str]:  # noqa: ANN401
    """Validate a parsed tips response: 1-10 non-empty strings of at most 200 characters."""
    try:
        return tips_adapter.validate_python(value, strict=True)
    except ValidationError as e:
        raise to_schema_error(e, root="tips") from e


def validate_insights(value: Any) -> DestinationInsights:  # noqa: ANN401
    try:
        return DestinationInsights.model_validate(value)
    except ValidationError as e:
        raise to_schema_error(e) from e


def validate_activity_suggestions(value: Any) -> ActivitySuggestions:  # noqa: ANN401
    try:
        return ActivitySuggestions.model_validate(value)
    except ValidationError as e:
        raise to_schema_error(e) from e

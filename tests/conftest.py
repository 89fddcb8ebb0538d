# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os

# Must happen before app settings are imported anywhere
os.environ["GEMINI_API_KEY"] = "test-api-key"
os.environ["LOG_TO_FILE"] = "false"
os.environ["AI_RETRY_DELAY"] = "0"

from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

import pytest
from orjson import dumps

from app.managers.retry_orchestrator import RetryPolicy

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def make_activity(
    start: str = "09:00",
    end: str = "11:00",
    amount: float = 20,
    currency: str = "USD",
    **overrides: Any,  # noqa: ANN401
) -> dict[str, Any]:
    activity: dict[str, Any] = {
        "type": "Cultural",
        "title": "Louvre Museum",
        "description": "See the Mona Lisa and the Winged Victory",
        "startTime": start,
        "endTime": end,
        "cost": {"amount": amount, "currency": currency},
        "location": {
            "name": "Louvre Museum",
            "address": "Rue de Rivoli, 75001 Paris, France",
            "coordinates": [2.3376, 48.8606],
        },
        "notes": "Book tickets online",
    }
    activity.update(overrides)
    return activity


def make_day(day: date | str, activities: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "date": day if isinstance(day, str) else day.isoformat(),
        "activities": activities
        if activities is not None
        else [
            make_activity("09:00", "11:00", 20),
            make_activity("12:00", "13:30", 35, type="Dining", title="Lunch at Le Procope"),
            make_activity("15:00", "17:00", 0, type="Sightseeing", title="Seine walk"),
        ],
        "notes": "Wear comfortable shoes",
    }


def make_batch(start: date, days: int, currency: str = "USD") -> dict[str, Any]:
    plans = []
    for offset in range(days):
        plan = make_day(start + timedelta(days=offset))
        for activity in plan["activities"]:
            activity["cost"]["currency"] = currency
        plans.append(plan)
    return {"dayPlans": plans}


class FakeModelClient:
    """
    Scripted model client.

    Each ``invoke`` pops the next scripted reply: a string is returned, an
    exception is raised and a callable is called with the prompt.
    """

    def __init__(self, replies: list[Any] | None = None) -> None:
        self.replies = list(replies or [])
        self.prompts: list[str] = []

    async def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            msg = "FakeModelClient ran out of replies"
            raise AssertionError(msg)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply


def to_text(value: Any) -> str:  # noqa: ANN401
    return dumps(value).decode()


@pytest.fixture
def fake_model() -> Callable[..., FakeModelClient]:
    return FakeModelClient


@pytest.fixture
def no_delay_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, initial_delay=0, factor=2, max_delay=0)


@pytest.fixture
def fixture_text() -> Callable[[str], str]:
    def read(name: str) -> str:
        with open(os.path.join(FIXTURES_DIR, name), encoding="utf-8") as f:
            return f.read()

    return read

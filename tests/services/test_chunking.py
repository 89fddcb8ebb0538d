# tests/services/test_chunking.py
"""Tests for app/services/chunking.py module."""

from datetime import date

import pytest

from app.schemas.ai import Budget, Destination, GenerationRequest
from app.services.chunking import plan_chunks


def request_for(start: date, end: date, planned: float = 800) -> GenerationRequest:
    return GenerationRequest(
        destination=Destination(city="Paris", country="France"),
        start_date=start,
        end_date=end,
        budget=Budget(planned=planned, currency="USD"),
    )


class TestPlanChunks:
    """Tests for splitting a trip into day chunks."""

    def test_four_days_two_chunks(self) -> None:
        chunks = plan_chunks(request_for(date(2025, 6, 1), date(2025, 6, 5)))

        assert [chunk.index for chunk in chunks] == [1, 2]
        assert all(chunk.total == 2 for chunk in chunks)
        assert chunks[0].dates == [date(2025, 6, 1), date(2025, 6, 2)]
        assert chunks[1].dates == [date(2025, 6, 3), date(2025, 6, 4)]
        assert all(chunk.daily_budget == 400 for chunk in chunks)

    def test_three_days_last_chunk_is_short(self) -> None:
        chunks = plan_chunks(request_for(date(2025, 6, 1), date(2025, 6, 4)))

        assert len(chunks) == 2
        assert chunks[1].dates == [date(2025, 6, 3)]

    def test_same_day_trip_plans_one_day(self) -> None:
        chunks = plan_chunks(request_for(date(2025, 6, 1), date(2025, 6, 1)))

        assert len(chunks) == 1
        assert chunks[0].dates == [date(2025, 6, 1)]
        assert chunks[0].daily_budget == 800

    @pytest.mark.parametrize(("planned", "expected"), [(801, 400), (999.99, 499), (0, 0)])
    def test_daily_budget_is_floored(self, planned: float, expected: int) -> None:
        chunks = plan_chunks(request_for(date(2025, 6, 1), date(2025, 6, 5), planned))
        assert chunks[0].daily_budget == expected

    def test_chunk_size_is_configurable(self) -> None:
        chunks = plan_chunks(request_for(date(2025, 6, 1), date(2025, 6, 5)), chunk_size=1)
        assert len(chunks) == 4
        assert all(chunk.daily_budget == 200 for chunk in chunks)

    def test_contains(self) -> None:
        chunk = plan_chunks(request_for(date(2025, 6, 1), date(2025, 6, 5)))[0]
        assert chunk.contains(date(2025, 6, 2))
        assert not chunk.contains(date(2025, 6, 3))
        assert chunk.currency == "USD"

# app/services/chunking.py

"""Split a trip into fixed-size day chunks, one model call per chunk."""

from dataclasses import dataclass
from datetime import date, timedelta
from math import ceil, floor

from app.configs.settings import CHUNK_SIZE_DAYS, MAX_TRIP_DAYS
from app.schemas.ai.itinerary import GenerationRequest


@dataclass(frozen=True)
class ChunkContext:
    """
    Everything the prompt for one chunk needs.

    Attributes:
        request: The normalized request the chunk belongs to.
        index: 1-based chunk number.
        total: Total number of chunks for the request.
        start_date: First day of the chunk.
        end_date: Last day of the chunk, inclusive.
        daily_budget: ``floor(planned budget / total chunks)``.
    """

    request: GenerationRequest
    index: int
    total: int
    start_date: date
    end_date: date
    daily_budget: int

    @property
    def dates(self) -> list[date]:
        return [
            self.start_date + timedelta(days=offset)
            for offset in range((self.end_date - self.start_date).days + 1)
        ]

    @property
    def currency(self) -> str:
        return self.request.budget.currency

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def plan_chunks(
    request: GenerationRequest,
    chunk_size: int = CHUNK_SIZE_DAYS,
) -> list[ChunkContext]:
    """
    Split the request's trip into consecutive chunks of ``chunk_size`` days.

    The trip length is capped at MAX_TRIP_DAYS again here, independent of the
    normalizer.
    """
    total_days = min(request.trip_days, MAX_TRIP_DAYS)
    total_chunks = ceil(total_days / chunk_size)
    daily_budget = floor(request.budget.planned / total_chunks)
    last_day = request.start_date + timedelta(days=total_days - 1)

    chunks = []
    for position in range(total_chunks):
        start = request.start_date + timedelta(days=position * chunk_size)
        end = min(start + timedelta(days=chunk_size - 1), last_day)
        chunks.append(
            ChunkContext(
                request=request,
                index=position + 1,
                total=total_chunks,
                start_date=start,
                end_date=end,
                daily_budget=daily_budget,
            ),
        )
    return chunks

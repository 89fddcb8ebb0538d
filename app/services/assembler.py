# app/services/assembler.py

"""Merge validated chunk results and tips into the final itinerary."""

from collections.abc import Iterable, Sequence
from itertools import pairwise
from logging import getLogger
from math import fsum, isclose

from app.configs.settings import MAX_TIPS
from app.errors import AssemblyInconsistencyError
from app.schemas.ai.itinerary import DayPlanBatch, GenerationRequest, GenerationResult
from app.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


def merge_tips(*tip_lists: Iterable[str], limit: int = MAX_TIPS) -> list[str]:
    """Concatenate tip lists, dropping case-insensitive duplicates, capped at ``limit``."""
    seen: set[str] = set()
    merged: list[str] = []
    for tips in tip_lists:
        for tip in tips:
            text = tip.strip()
            key = text.casefold()
            if not text or key in seen:
                continue
            seen.add(key)
            merged.append(text)
            if len(merged) == limit:
                return merged
    return merged


def chunk_subtotal(batch: DayPlanBatch) -> float:
    """Sum the raw activity cost amounts of one chunk."""
    return fsum(
        activity.cost.amount for plan in batch.day_plans for activity in plan.activities
    )


def assemble(
    request: GenerationRequest,
    chunk_results: Sequence[DayPlanBatch],
    tip_lists: Sequence[Iterable[str]] = (),
) -> GenerationResult:
    """
    Build the GenerationResult from chunk results in chunk order.

    Args:
        request: The normalized request; its budget is echoed in the result.
        chunk_results: Validated day plans, one batch per chunk, in order.
        tip_lists: Tip lists to merge.

    Returns:
        The assembled itinerary.

    Raises:
        AssemblyInconsistencyError: If dates do not ascend across chunks or the
            recomputed total disagrees with the chunk subtotals.
    """
    day_plans = [plan for batch in chunk_results for plan in batch.day_plans]

    for previous, current in pairwise(day_plans):
        if current.day <= previous.day:
            msg = f"Day plan dates are not ascending: {previous.day} followed by {current.day}"
            logger.error(msg)
            raise AssemblyInconsistencyError(detail=msg)

    result = GenerationResult(
        day_plans=day_plans,
        tips=merge_tips(*tip_lists),
        planned_budget=request.budget,
    )

    subtotals = fsum(chunk_subtotal(batch) for batch in chunk_results)
    if not isclose(result.total_cost, subtotals, abs_tol=0.01):
        msg = f"Recomputed cost {result.total_cost} does not match chunk subtotals {subtotals}"
        logger.error(msg)
        raise AssemblyInconsistencyError(detail=msg)

    budget = result.budget
    if budget.actual > budget.planned:
        logger.warning(
            f"Itinerary cost {budget.actual} {budget.currency} exceeds planned budget {budget.planned}",
        )

    logger.info(f"Assembled itinerary with {len(day_plans)} days and {len(result.tips)} tips")
    return result

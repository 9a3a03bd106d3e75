"""
sm2.maturity
------------

This module classifies cards as mature once their review interval reaches a fixed threshold.

Functions:
    is_mature: Whether an interval counts as mature.
    mature_card_ids: The ids of the mature cards among a collection of review states.
    maturity_summary: Counts of new, learning and mature cards.
"""

from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sm2.review_state import ReviewState

MATURITY_THRESHOLD = 21


def is_mature(interval: int, threshold: int = MATURITY_THRESHOLD) -> bool:
    return interval >= threshold


def mature_card_ids(
    states: Iterable[ReviewState], threshold: int = MATURITY_THRESHOLD
) -> list[str]:
    """
    Returns the ids of the cards whose interval has reached the maturity threshold, sorted.
    """

    return sorted(
        state.card_id for state in states if is_mature(state.interval, threshold)
    )


@dataclass(frozen=True)
class MaturitySummary:
    """
    Counts of cards by how far along they are.

    Attributes:
        new: Cards that have never been reviewed.
        learning: Reviewed cards whose interval is still below the threshold.
        mature: Cards whose interval has reached the threshold.
    """

    new: int
    learning: int
    mature: int

    @property
    def total(self) -> int:
        return self.new + self.learning + self.mature


def maturity_summary(
    states: Iterable[ReviewState], threshold: int = MATURITY_THRESHOLD
) -> MaturitySummary:
    new = learning = mature = 0

    for state in states:
        if state.last_reviewed_at is None:
            new += 1
        elif is_mature(state.interval, threshold):
            mature += 1
        else:
            learning += 1

    return MaturitySummary(new=new, learning=learning, mature=mature)


__all__ = [
    "MATURITY_THRESHOLD",
    "is_mature",
    "mature_card_ids",
    "MaturitySummary",
    "maturity_summary",
]

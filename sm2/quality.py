"""
sm2.quality
-----------

This module defines the Quality enum and the validation applied to every incoming rating.

Classes:
    Quality: Enum representing the six SM-2 recall grades.
"""

from __future__ import annotations
from enum import IntEnum
from sm2.exceptions import InvalidQuality

MIN_QUALITY = 0
MAX_QUALITY = 5


class Quality(IntEnum):
    """
    Enum representing the recall grade given when reviewing a card.

    0 is a complete blackout and 5 is perfect, effortless recall.
    """

    Again = 0
    Incorrect = 1
    Hard = 2
    Good = 3
    Confident = 4
    Easy = 5


# the four buttons shown to a learner during a study session
BUTTON_QUALITIES = (Quality.Again, Quality.Hard, Quality.Good, Quality.Easy)


def validate_quality(quality: int) -> Quality:
    """
    Checks that a rating is an integer grade between 0 and 5.

    Args:
        quality: The rating to check. Plain ints and Quality members are both accepted.

    Returns:
        Quality: The rating as a Quality member.

    Raises:
        InvalidQuality: If the rating is not an integer in [0, 5].
    """

    # bool is a subclass of int but never a meaningful grade
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQuality(quality)

    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQuality(quality)

    return Quality(quality)


__all__ = ["Quality", "BUTTON_QUALITIES", "validate_quality"]

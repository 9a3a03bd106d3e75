"""
sm2.streak
----------

This module tracks a learner's daily study streak.

Classes:
    StreakRecord: A learner's current and longest streak of consecutive study days.

Functions:
    record_study: Updates a StreakRecord with a day on which the learner studied.
    streak_as_of: The streak to display on a given day.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import TypedDict
import json
from typing_extensions import Self

ONE_DAY = timedelta(days=1)


class StreakRecordDict(TypedDict):
    """
    JSON-serializable dictionary representation of a StreakRecord object.
    """

    current_streak: int
    longest_streak: int
    last_study_date: str | None
    study_dates: list[str]


@dataclass(frozen=True)
class StreakRecord:
    """
    Represents a learner's streak of consecutive calendar days with at least one review.

    Dates are calendar dates; which time zone a review falls into is decided by the caller.

    Attributes:
        current_streak: The number of consecutive study days ending on last_study_date.
        longest_streak: The longest streak the learner has ever had.
        last_study_date: The most recent day the learner studied, or None if never.
        study_dates: Every day the learner studied.
    """

    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: date | None = None
    study_dates: frozenset[date] = frozenset()

    def to_dict(self) -> StreakRecordDict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_study_date": (
                self.last_study_date.isoformat() if self.last_study_date else None
            ),
            "study_dates": sorted(
                study_date.isoformat() for study_date in self.study_dates
            ),
        }

    @classmethod
    def from_dict(cls, source_dict: StreakRecordDict) -> Self:
        return cls(
            current_streak=int(source_dict["current_streak"]),
            longest_streak=int(source_dict["longest_streak"]),
            last_study_date=(
                date.fromisoformat(source_dict["last_study_date"])
                if source_dict["last_study_date"]
                else None
            ),
            study_dates=frozenset(
                date.fromisoformat(study_date)
                for study_date in source_dict["study_dates"]
            ),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        source_dict: StreakRecordDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


def record_study(streak: StreakRecord, studied_on: date) -> StreakRecord:
    """
    Records that the learner studied on a given day.

    Studying again on the last study day changes nothing. Studying on the day after it extends
    the streak, any later day starts a new streak of 1. The longest streak never decreases.

    Args:
        streak: The learner's current streak record.
        studied_on: The calendar day the learner studied.

    Returns:
        StreakRecord: The updated streak record. The given record is not modified.
    """

    last_study_date = streak.last_study_date

    if studied_on == last_study_date:
        return streak

    study_dates = streak.study_dates | {studied_on}

    # a late-arriving day only fills in the calendar
    if last_study_date is not None and studied_on < last_study_date:
        return replace(streak, study_dates=study_dates)

    if last_study_date is not None and studied_on == last_study_date + ONE_DAY:
        current_streak = streak.current_streak + 1
    else:
        current_streak = 1

    return StreakRecord(
        current_streak=current_streak,
        longest_streak=max(streak.longest_streak, current_streak),
        last_study_date=studied_on,
        study_dates=study_dates,
    )


def streak_as_of(streak: StreakRecord, today: date) -> int:
    """
    Returns the streak to show the learner on `today`.

    The streak is still alive if the learner last studied today or yesterday, and 0 otherwise.
    """

    if streak.last_study_date is None:
        return 0

    if today - streak.last_study_date > ONE_DAY:
        return 0

    return streak.current_streak


__all__ = ["StreakRecord", "record_study", "streak_as_of"]

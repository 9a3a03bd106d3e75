"""
sm2.scheduler
-------------

This module defines the Scheduler class as well as the constants used in its calculations.

Classes:
    ReviewResult: The outcome of applying one quality rating to an SM-2 state.
    Scheduler: The SM-2 spaced-repetition scheduler.

Functions:
    compute: Applies one quality rating with the default SM-2 constants.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from copy import copy
import json
import math
from typing import TypedDict
from typing_extensions import Self
from sm2.clock import Clock, SystemClock
from sm2.logging import get_logger
from sm2.maturity import MATURITY_THRESHOLD
from sm2.quality import BUTTON_QUALITIES, MAX_QUALITY, Quality, validate_quality
from sm2.review_log import ReviewLog
from sm2.review_state import DEFAULT_EASE_FACTOR, ReviewState

MINIMUM_EASE_FACTOR = 1.3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
FAILURE_INTERVAL = 1
PASSING_QUALITY = 3

logger = get_logger(__name__)


class SchedulerDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Scheduler object.
    """

    initial_ease_factor: float
    minimum_ease_factor: float
    first_interval: int
    second_interval: int
    failure_interval: int
    passing_quality: int
    maturity_threshold: int


@dataclass(frozen=True)
class ReviewResult:
    """
    The new SM-2 values produced by a single review.

    Attributes:
        ease_factor: The updated ease factor. Never rounded.
        interval: The number of days until the next review.
        repetitions: The updated count of consecutive successful reviews.
        next_review_at: The date and time when the card is due next.
    """

    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: datetime


def _round_half_away_from_zero(value: float) -> int:
    # the builtin round() rounds halves to even
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(init=False)
class Scheduler:
    """
    The SM-2 scheduler.

    Enables the reviewing and future scheduling of cards according to the SuperMemo-2 algorithm.
    The defaults reproduce classic SM-2.

    Attributes:
        initial_ease_factor: The ease factor given to cards that have never been reviewed.
        minimum_ease_factor: The floor the ease factor is clamped to after each review.
        first_interval: Days until the next review after the first successful review.
        second_interval: Days until the next review after the second consecutive successful review.
        failure_interval: Days until the next review after a failed review.
        passing_quality: The lowest quality rating that counts as a successful review.
        maturity_threshold: The interval, in days, from which a card counts as mature.
        clock: Supplies the review time when none is given explicitly.
    """

    initial_ease_factor: float
    minimum_ease_factor: float
    first_interval: int
    second_interval: int
    failure_interval: int
    passing_quality: int
    maturity_threshold: int
    clock: Clock = field(compare=False, repr=False)

    def __init__(
        self,
        initial_ease_factor: float = DEFAULT_EASE_FACTOR,
        minimum_ease_factor: float = MINIMUM_EASE_FACTOR,
        first_interval: int = FIRST_INTERVAL,
        second_interval: int = SECOND_INTERVAL,
        failure_interval: int = FAILURE_INTERVAL,
        passing_quality: int = PASSING_QUALITY,
        maturity_threshold: int = MATURITY_THRESHOLD,
        clock: Clock | None = None,
    ) -> None:
        self._validate_parameters(
            initial_ease_factor=initial_ease_factor,
            minimum_ease_factor=minimum_ease_factor,
            first_interval=first_interval,
            second_interval=second_interval,
            failure_interval=failure_interval,
            passing_quality=passing_quality,
            maturity_threshold=maturity_threshold,
        )

        self.initial_ease_factor = initial_ease_factor
        self.minimum_ease_factor = minimum_ease_factor
        self.first_interval = first_interval
        self.second_interval = second_interval
        self.failure_interval = failure_interval
        self.passing_quality = passing_quality
        self.maturity_threshold = maturity_threshold
        self.clock = clock if clock is not None else SystemClock()

    def _validate_parameters(
        self,
        *,
        initial_ease_factor: float,
        minimum_ease_factor: float,
        first_interval: int,
        second_interval: int,
        failure_interval: int,
        passing_quality: int,
        maturity_threshold: int,
    ) -> None:
        error_messages = []

        if minimum_ease_factor <= 0:
            error_messages.append(
                f"minimum_ease_factor = {minimum_ease_factor} must be positive"
            )
        if initial_ease_factor < minimum_ease_factor:
            error_messages.append(
                f"initial_ease_factor = {initial_ease_factor} is below minimum_ease_factor = {minimum_ease_factor}"
            )
        for name, interval in (
            ("first_interval", first_interval),
            ("second_interval", second_interval),
            ("failure_interval", failure_interval),
        ):
            if interval < 1:
                error_messages.append(f"{name} = {interval} must be at least 1 day")
        if not 1 <= passing_quality <= MAX_QUALITY:
            error_messages.append(
                f"passing_quality = {passing_quality} is out of bounds: (1, {MAX_QUALITY})"
            )
        if maturity_threshold < 1:
            error_messages.append(
                f"maturity_threshold = {maturity_threshold} must be at least 1 day"
            )

        if len(error_messages) > 0:
            raise ValueError(
                "One or more scheduler parameters are invalid:\n"
                + "\n".join(error_messages)
            )

    def compute(
        self,
        quality: Quality | int,
        ease_factor: float,
        interval: int,
        repetitions: int,
        now: datetime,
    ) -> ReviewResult:
        """
        Applies a quality rating to a card's SM-2 values.

        This is a pure function of its arguments: identical inputs always produce identical results.

        Args:
            quality: The quality rating of the review, from 0 to 5.
            ease_factor: The card's current ease factor.
            interval: The card's current interval in days.
            repetitions: The card's current number of consecutive successful reviews.
            now: The moment of the review, the next review is scheduled relative to it.

        Returns:
            ReviewResult: The updated ease factor, interval, repetitions and next review time.

        Raises:
            InvalidQuality: If the quality is not an integer between 0 and 5.
        """

        quality = validate_quality(quality)

        next_ease_factor = self._next_ease_factor(
            ease_factor=ease_factor, quality=quality
        )

        if quality < self.passing_quality:
            next_repetitions = 0
            next_interval = self.failure_interval

        else:
            next_repetitions = repetitions + 1

            if next_repetitions == 1:
                next_interval = self.first_interval
            elif next_repetitions == 2:
                next_interval = self.second_interval
            else:
                # grows the previous interval, not the one just computed
                next_interval = _round_half_away_from_zero(interval * next_ease_factor)

                # must be at least 1 day long
                next_interval = max(next_interval, 1)

        return ReviewResult(
            ease_factor=next_ease_factor,
            interval=next_interval,
            repetitions=next_repetitions,
            next_review_at=now + timedelta(days=next_interval),
        )

    def review_state(
        self,
        state: ReviewState,
        quality: Quality | int,
        review_datetime: datetime | None = None,
    ) -> tuple[ReviewState, ReviewLog]:
        """
        Reviews a card's state with a given quality rating at a given time.

        The given state is left untouched; a new state is returned with the review appended to
        its history.

        Args:
            state: The review state being updated.
            quality: The quality rating given during the review.
            review_datetime: The date and time of the review. Defaults to the scheduler's clock.

        Returns:
            tuple[ReviewState, ReviewLog]: The updated state and the log entry of the review.

        Raises:
            InvalidQuality: If the quality is not an integer between 0 and 5.
            ValueError: If the `review_datetime` argument is not timezone-aware and set to UTC.
        """

        if review_datetime is not None and (
            (review_datetime.tzinfo is None) or (review_datetime.tzinfo != timezone.utc)
        ):
            raise ValueError("datetime must be timezone-aware and set to UTC")

        if review_datetime is None:
            review_datetime = self.clock.now()

        result = self.compute(
            quality=quality,
            ease_factor=state.ease_factor,
            interval=state.interval,
            repetitions=state.repetitions,
            now=review_datetime,
        )
        quality = Quality(quality)

        review_log = ReviewLog(
            review_datetime=review_datetime,
            quality=quality,
            interval=result.interval,
        )

        state = copy(state)
        state.ease_factor = result.ease_factor
        state.interval = result.interval
        state.repetitions = result.repetitions
        state.next_review_at = result.next_review_at
        state.last_reviewed_at = review_datetime
        state.last_quality = quality
        state.history = state.history.append(review_log)

        logger.debug(
            "review_computed",
            card_id=state.card_id,
            learner_id=state.learner_id,
            quality=int(quality),
            ease_factor=state.ease_factor,
            interval=state.interval,
            repetitions=state.repetitions,
        )

        return state, review_log

    def reschedule_state(self, state: ReviewState) -> ReviewState:
        """
        Replays a state's review history with the current scheduler.

        If a state was built with different scheduler constants, this recomputes it as if it had
        always been scheduled with this scheduler. The same reviews are replayed in order, so the
        new history holds the same ratings at the same times with the recomputed intervals.

        Args:
            state: The review state to be rescheduled.

        Returns:
            ReviewState: A new state that has been rescheduled with this scheduler.
        """

        rescheduled_state = ReviewState(
            card_id=state.card_id,
            learner_id=state.learner_id,
            ease_factor=self.initial_ease_factor,
            next_review_at=state.next_review_at if len(state.history) == 0 else None,
            version=state.version,
        )

        for review_log in state.history:
            rescheduled_state, _ = self.review_state(
                state=rescheduled_state,
                quality=review_log.quality,
                review_datetime=review_log.review_datetime,
            )

        return rescheduled_state

    def preview_intervals(self, state: ReviewState) -> dict[Quality, int]:
        """
        Returns the interval each study button would schedule the card for, without reviewing it.
        """

        return {
            quality: self.compute(
                quality=quality,
                ease_factor=state.ease_factor,
                interval=state.interval,
                repetitions=state.repetitions,
                now=state.next_review_at,
            ).interval
            for quality in BUTTON_QUALITIES
        }

    def is_mature(self, state: ReviewState) -> bool:
        return state.interval >= self.maturity_threshold

    def to_dict(self) -> SchedulerDict:
        """
        Returns a dictionary representation of the Scheduler object.

        Returns:
            SchedulerDict: A dictionary representation of the Scheduler object.
        """

        return {
            "initial_ease_factor": self.initial_ease_factor,
            "minimum_ease_factor": self.minimum_ease_factor,
            "first_interval": self.first_interval,
            "second_interval": self.second_interval,
            "failure_interval": self.failure_interval,
            "passing_quality": self.passing_quality,
            "maturity_threshold": self.maturity_threshold,
        }

    @classmethod
    def from_dict(cls, source_dict: SchedulerDict) -> Self:
        """
        Creates a Scheduler object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the provided dictionary.
        """

        return cls(
            initial_ease_factor=source_dict["initial_ease_factor"],
            minimum_ease_factor=source_dict["minimum_ease_factor"],
            first_interval=source_dict["first_interval"],
            second_interval=source_dict["second_interval"],
            failure_interval=source_dict["failure_interval"],
            passing_quality=source_dict["passing_quality"],
            maturity_threshold=source_dict["maturity_threshold"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Scheduler object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Scheduler object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Scheduler object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the JSON string.
        """

        source_dict: SchedulerDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def _next_ease_factor(self, *, ease_factor: float, quality: Quality) -> float:
        distance = MAX_QUALITY - quality
        next_ease_factor = ease_factor + (0.1 - distance * (0.08 + distance * 0.02))

        return max(self.minimum_ease_factor, next_ease_factor)


_DEFAULT_SCHEDULER = Scheduler()


def compute(
    quality: Quality | int,
    ease_factor: float,
    interval: int,
    repetitions: int,
    now: datetime,
) -> ReviewResult:
    """
    Applies a quality rating to SM-2 values using the classic SM-2 constants.

    See Scheduler.compute.
    """

    return _DEFAULT_SCHEDULER.compute(
        quality=quality,
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        now=now,
    )


__all__ = ["Scheduler", "ReviewResult", "compute"]

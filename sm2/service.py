"""
sm2.service
-----------

This module ties the scheduler, the store and the clock together for a study-session
orchestrator.

Classes:
    ReviewService: Submits reviews and builds study batches on top of a ReviewStateStore.
    StudySession: Running totals of the reviews submitted during one study session.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import partial
from sm2.clock import Clock, SystemClock
from sm2.due import DueSelection, Scope, select_due
from sm2.exceptions import ConcurrentUpdate
from sm2.logging import get_logger
from sm2.quality import Quality, validate_quality
from sm2.review_state import ReviewState
from sm2.scheduler import Scheduler
from sm2.store import ReviewStateStore
from sm2.streak import StreakRecord, record_study, streak_as_of

DEFAULT_MAX_RETRIES = 3

logger = get_logger(__name__)


class ReviewService:
    """
    The entry point of a study session.

    Attributes:
        store: Where review states and streak records are kept.
        scheduler: Computes new review states.
        clock: Supplies the time of each review and the study day it counts towards.
        max_retries: How many times a review is retried after losing a race with another
            review of the same card before ConcurrentUpdate is raised.
    """

    def __init__(
        self,
        store: ReviewStateStore,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}")

        self.store = store
        self.clock = clock if clock is not None else SystemClock()
        self.scheduler = (
            scheduler if scheduler is not None else Scheduler(clock=self.clock)
        )
        self.max_retries = max_retries

    def introduce_card(self, card_id: str, learner_id: str) -> ReviewState:
        return self.store.introduce(
            card_id=card_id,
            learner_id=learner_id,
            now=self.clock.now(),
            ease_factor=self.scheduler.initial_ease_factor,
        )

    def submit_review(
        self, card_id: str, learner_id: str, quality: Quality | int
    ) -> ReviewState:
        """
        Applies a learner's rating of a card and records the study day.

        Args:
            card_id: The id of the reviewed card.
            learner_id: The id of the learner who reviewed it.
            quality: The quality rating of the review, from 0 to 5.

        Returns:
            ReviewState: The new, stored state of the card.

        Raises:
            InvalidQuality: If the quality is not an integer between 0 and 5.
            StateNotFound: If the card was never introduced to the learner.
            ConcurrentUpdate: If the review kept losing races for more than max_retries attempts.
        """

        # fail before touching the store
        quality = validate_quality(quality)

        attempt = 0
        while True:
            state = self.store.load(card_id=card_id, learner_id=learner_id)
            review_datetime = self.clock.now()
            new_state, _ = self.scheduler.review_state(
                state=state, quality=quality, review_datetime=review_datetime
            )

            try:
                saved_state = self.store.save(new_state)
            except ConcurrentUpdate:
                attempt += 1
                if attempt > self.max_retries:
                    raise
                logger.info(
                    "review_conflict_retry",
                    card_id=card_id,
                    learner_id=learner_id,
                    attempt=attempt,
                )
                continue

            break

        streak = self.store.update_streak(
            learner_id, partial(record_study, studied_on=self.clock.today())
        )

        logger.info(
            "review_submitted",
            card_id=card_id,
            learner_id=learner_id,
            quality=int(quality),
            interval=saved_state.interval,
            next_review_at=saved_state.next_review_at.isoformat(),
            current_streak=streak.current_streak,
        )

        return saved_state

    def due_cards(
        self,
        learner_id: str,
        scope: Scope | None = None,
        limit: int | None = None,
    ) -> DueSelection:
        return select_due(
            states=self.store.states_for(learner_id),
            as_of=self.clock.now(),
            scope=scope,
            limit=limit,
        )

    def streak(self, learner_id: str) -> StreakRecord:
        return self.store.load_streak(learner_id)

    def current_streak(self, learner_id: str) -> int:
        return streak_as_of(self.store.load_streak(learner_id), self.clock.today())

    def start_session(self, learner_id: str) -> StudySession:
        return StudySession(service=self, learner_id=learner_id)


@dataclass
class StudySession:
    """
    Counts the reviews a learner submits during one sitting.

    Attributes:
        service: The service reviews are submitted through.
        learner_id: The learner studying.
        cards_studied: The number of reviews submitted so far.
        correct_answers: The number of those reviews that passed.
    """

    service: ReviewService
    learner_id: str
    cards_studied: int = 0
    correct_answers: int = 0

    def submit(self, card_id: str, quality: Quality | int) -> ReviewState:
        state = self.service.submit_review(
            card_id=card_id, learner_id=self.learner_id, quality=quality
        )

        self.cards_studied += 1
        if quality >= self.service.scheduler.passing_quality:
            self.correct_answers += 1

        return state

    @property
    def accuracy(self) -> float:
        if self.cards_studied == 0:
            return 0.0
        return self.correct_answers / self.cards_studied


__all__ = ["ReviewService", "StudySession"]

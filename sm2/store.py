"""
sm2.store
---------

This module defines the storage interface the scheduler relies on and an in-memory reference
implementation of it.

Classes:
    ReviewStateStore: Interface of a store of review states and streak records.
    InMemoryReviewStateStore: Thread-safe, dictionary-backed ReviewStateStore.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections.abc import Callable
from copy import copy
from datetime import datetime
import threading
from sm2.due import Scope
from sm2.exceptions import ConcurrentUpdate, StateAlreadyExists, StateNotFound
from sm2.logging import get_logger
from sm2.review_state import DEFAULT_EASE_FACTOR, ReviewState
from sm2.streak import StreakRecord

logger = get_logger(__name__)


class ReviewStateStore(ABC):
    """
    Persists one ReviewState per (card, learner) pair and one StreakRecord per learner.

    Implementations must make save() a compare-and-swap on ReviewState.version so that two
    reviews of the same card can never silently overwrite each other.
    """

    @abstractmethod
    def introduce(
        self,
        card_id: str,
        learner_id: str,
        now: datetime,
        ease_factor: float = DEFAULT_EASE_FACTOR,
    ) -> ReviewState:
        """
        Creates the initial state of a card for a learner, due immediately.

        Raises:
            StateAlreadyExists: If the learner already has a state for the card.
        """

    @abstractmethod
    def load(self, card_id: str, learner_id: str) -> ReviewState:
        """
        Raises:
            StateNotFound: If there is no state for the card and learner.
        """

    @abstractmethod
    def save(self, state: ReviewState) -> ReviewState:
        """
        Replaces the stored state, provided it is still at `state.version`.

        Returns:
            ReviewState: The stored state, with its version incremented.

        Raises:
            StateNotFound: If there is no state for the card and learner.
            ConcurrentUpdate: If the stored state has been saved since `state` was loaded.
        """

    @abstractmethod
    def states_for(
        self, learner_id: str, scope: Scope | None = None
    ) -> list[ReviewState]: ...

    @abstractmethod
    def load_streak(self, learner_id: str) -> StreakRecord: ...

    @abstractmethod
    def update_streak(
        self, learner_id: str, update: Callable[[StreakRecord], StreakRecord]
    ) -> StreakRecord:
        """
        Applies `update` to the learner's streak record as a single atomic step.
        """


class InMemoryReviewStateStore(ReviewStateStore):
    """
    Keeps review states and streak records in dictionaries guarded by a lock.

    States are copied on the way in and on the way out, so callers can never change what is
    stored without going through save().
    """

    def __init__(self) -> None:
        self._states: dict[tuple[str, str], ReviewState] = {}
        self._streaks: dict[str, StreakRecord] = {}
        self._lock = threading.Lock()

    def introduce(
        self,
        card_id: str,
        learner_id: str,
        now: datetime,
        ease_factor: float = DEFAULT_EASE_FACTOR,
    ) -> ReviewState:
        key = (card_id, learner_id)

        with self._lock:
            if key in self._states:
                raise StateAlreadyExists(card_id, learner_id)

            state = ReviewState(
                card_id=card_id,
                learner_id=learner_id,
                ease_factor=ease_factor,
                next_review_at=now,
            )
            self._states[key] = state

        logger.debug("state_introduced", card_id=card_id, learner_id=learner_id)

        return copy(state)

    def load(self, card_id: str, learner_id: str) -> ReviewState:
        with self._lock:
            state = self._states.get((card_id, learner_id))

        if state is None:
            raise StateNotFound(card_id, learner_id)

        return copy(state)

    def save(self, state: ReviewState) -> ReviewState:
        with self._lock:
            stored = self._states.get(state.key)

            if stored is None:
                raise StateNotFound(state.card_id, state.learner_id)

            if stored.version != state.version:
                raise ConcurrentUpdate(
                    state.card_id,
                    state.learner_id,
                    expected_version=state.version,
                    actual_version=stored.version,
                )

            stored = copy(state)
            stored.version = state.version + 1
            self._states[state.key] = stored

        return copy(stored)

    def delete(self, card_id: str, learner_id: str) -> None:
        """
        Removes a state, for when the card or the learner is deleted.
        """

        with self._lock:
            if self._states.pop((card_id, learner_id), None) is None:
                raise StateNotFound(card_id, learner_id)

    def states_for(
        self, learner_id: str, scope: Scope | None = None
    ) -> list[ReviewState]:
        with self._lock:
            states = [
                copy(state)
                for (_, state_learner_id), state in self._states.items()
                if state_learner_id == learner_id
            ]

        if scope is not None:
            states = [state for state in states if scope(state)]

        return states

    def load_streak(self, learner_id: str) -> StreakRecord:
        with self._lock:
            return self._streaks.get(learner_id, StreakRecord())

    def update_streak(
        self, learner_id: str, update: Callable[[StreakRecord], StreakRecord]
    ) -> StreakRecord:
        with self._lock:
            streak = update(self._streaks.get(learner_id, StreakRecord()))
            self._streaks[learner_id] = streak

        return streak


__all__ = ["ReviewStateStore", "InMemoryReviewStateStore"]

"""
sm2.due
-------

This module selects which cards are due for review.

Classes:
    DueSelection: A lazy, restartable, ordered sequence of due card ids.

Functions:
    select_due: Selects the due cards among a collection of review states.
    count_due: Counts the due cards among a collection of review states.
    in_collection: Builds a scope restricting the selection to a set of card ids.
"""

from __future__ import annotations
from collections.abc import Callable, Collection, Iterable, Iterator
from datetime import datetime
from sm2.review_state import ReviewState

Scope = Callable[[ReviewState], bool]


class DueSelection:
    """
    The card ids due at a point in time, earliest-due first.

    Nothing is filtered or sorted until the selection is iterated, and it can be iterated any
    number of times with the same result. Ties on the due time are broken by card id.

    Attributes:
        as_of: The point in time the selection is made for.
        limit: The maximum number of card ids yielded, or None for no limit.
    """

    def __init__(
        self,
        states: Iterable[ReviewState],
        as_of: datetime,
        scope: Scope | None = None,
        limit: int | None = None,
    ) -> None:
        if limit is not None and limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")

        # snapshot so a one-shot iterable can be walked again
        self._states = tuple(states)
        self._scope = scope
        self.as_of = as_of
        self.limit = limit

    def states(self) -> list[ReviewState]:
        """
        Returns the due review states themselves, in selection order.
        """

        due_states = [
            state
            for state in self._states
            if state.next_review_at <= self.as_of
            and (self._scope is None or self._scope(state))
        ]
        due_states.sort(key=lambda state: (state.next_review_at, state.card_id))

        if self.limit is not None:
            due_states = due_states[: self.limit]

        return due_states

    def __iter__(self) -> Iterator[str]:
        for state in self.states():
            yield state.card_id

    def __len__(self) -> int:
        return len(self.states())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"DueSelection(as_of={self.as_of.isoformat()}, card_ids={list(self)!r})"


def select_due(
    states: Iterable[ReviewState],
    as_of: datetime,
    scope: Scope | None = None,
    limit: int | None = None,
) -> DueSelection:
    """
    Selects the cards that are due for review.

    A card is due when its next review time is at or before `as_of`. The selection never
    modifies the given states.

    Args:
        states: The review states to select from.
        as_of: The point in time to select due cards for.
        scope: Optional predicate restricting which states are considered, for example to a
            single collection.
        limit: Optional maximum number of cards to select.

    Returns:
        DueSelection: The due card ids, earliest-due first, ties broken by card id.

    Raises:
        ValueError: If the limit is negative.
    """

    return DueSelection(states=states, as_of=as_of, scope=scope, limit=limit)


def count_due(
    states: Iterable[ReviewState],
    as_of: datetime,
    scope: Scope | None = None,
) -> int:
    return len(select_due(states=states, as_of=as_of, scope=scope))


def in_collection(card_ids: Collection[str]) -> Scope:
    card_ids = frozenset(card_ids)

    def _scope(state: ReviewState) -> bool:
        return state.card_id in card_ids

    return _scope


__all__ = ["DueSelection", "Scope", "select_due", "count_due", "in_collection"]

"""
sm2.exceptions
--------------

This module defines the errors raised by the sm2 package.

Classes:
    SM2Error: Base class of every error raised by this package.
    InvalidQuality: A rating outside of [0, 5] was submitted.
    StateNotFound: No ReviewState exists for a (card, learner) pair.
    StateAlreadyExists: A card was introduced twice to the same learner.
    ConcurrentUpdate: A ReviewState was saved on top of a newer version.
"""

from __future__ import annotations
from typing import Any


class SM2Error(Exception):
    """
    Base class of every error raised by the sm2 package.
    """


class InvalidQuality(SM2Error, ValueError):
    """
    Raised when a quality rating is not an integer between 0 and 5.

    Attributes:
        quality: The rejected rating.
    """

    def __init__(self, quality: Any) -> None:
        self.quality = quality
        super().__init__(f"Quality must be an integer between 0 and 5, got {quality!r}")


class StateNotFound(SM2Error, LookupError):
    """
    Raised when there is no ReviewState for a card and learner.

    Attributes:
        card_id: The id of the card that was looked up.
        learner_id: The id of the learner that was looked up.
    """

    def __init__(self, card_id: str, learner_id: str) -> None:
        self.card_id = card_id
        self.learner_id = learner_id
        super().__init__(
            f"No review state for card {card_id!r} and learner {learner_id!r}"
        )


class StateAlreadyExists(SM2Error):
    """
    Raised when a card is introduced to a learner who already has a ReviewState for it.
    """

    def __init__(self, card_id: str, learner_id: str) -> None:
        self.card_id = card_id
        self.learner_id = learner_id
        super().__init__(
            f"Card {card_id!r} was already introduced to learner {learner_id!r}"
        )


class ConcurrentUpdate(SM2Error):
    """
    Raised when a ReviewState is saved but the stored version has moved on since it was loaded.

    Attributes:
        card_id: The id of the card whose state was being saved.
        learner_id: The id of the learner whose state was being saved.
        expected_version: The version the caller loaded.
        actual_version: The version currently stored.
    """

    def __init__(
        self,
        card_id: str,
        learner_id: str,
        expected_version: int,
        actual_version: int,
    ) -> None:
        self.card_id = card_id
        self.learner_id = learner_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Review state for card {card_id!r} and learner {learner_id!r} is at version "
            f"{actual_version}, expected {expected_version}"
        )


__all__ = [
    "SM2Error",
    "InvalidQuality",
    "StateNotFound",
    "StateAlreadyExists",
    "ConcurrentUpdate",
]

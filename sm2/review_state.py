"""
sm2.review_state
----------------

This module defines the ReviewState class.

Classes:
    ReviewState: The SM-2 memory-strength state of one card for one learner.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TypedDict
import json
from typing_extensions import Self
from sm2.maturity import is_mature
from sm2.quality import Quality
from sm2.review_log import ReviewHistory, ReviewLogDict

DEFAULT_EASE_FACTOR = 2.5


class ReviewStateDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewState object.
    """

    card_id: str
    learner_id: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: str
    last_reviewed_at: str | None
    last_quality: int | None
    history: list[ReviewLogDict]
    version: int


@dataclass(init=False)
class ReviewState:
    """
    Represents how well a learner knows a card, in SM-2 terms.

    Attributes:
        card_id: The id of the card.
        learner_id: The id of the learner studying the card.
        ease_factor: Multiplier controlling how quickly the review interval grows. Never below 1.3.
        interval: The number of days between the last review and the next one.
        repetitions: The number of consecutive successful reviews.
        next_review_at: The date and time when the card is due next.
        last_reviewed_at: The date and time of the last review or None if never reviewed.
        last_quality: The quality rating of the last review or None if never reviewed.
        history: Every review of the card, oldest first.
        version: Incremented by the store on each save, used to detect lost updates.
    """

    card_id: str
    learner_id: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: datetime
    last_reviewed_at: datetime | None
    last_quality: Quality | None
    history: ReviewHistory
    version: int

    def __init__(
        self,
        card_id: str,
        learner_id: str,
        ease_factor: float = DEFAULT_EASE_FACTOR,
        interval: int = 0,
        repetitions: int = 0,
        next_review_at: datetime | None = None,
        last_reviewed_at: datetime | None = None,
        last_quality: Quality | int | None = None,
        history: ReviewHistory | None = None,
        version: int = 0,
    ) -> None:
        self.card_id = card_id
        self.learner_id = learner_id
        self.ease_factor = ease_factor
        self.interval = interval
        self.repetitions = repetitions

        if next_review_at is None:
            # new cards are due immediately
            next_review_at = datetime.now(timezone.utc)
        self.next_review_at = next_review_at

        self.last_reviewed_at = last_reviewed_at
        self.last_quality = Quality(last_quality) if last_quality is not None else None
        self.history = history if history is not None else ReviewHistory()
        self.version = version

    @property
    def key(self) -> tuple[str, str]:
        return (self.card_id, self.learner_id)

    @property
    def is_mature(self) -> bool:
        return is_mature(self.interval)

    @property
    def is_new(self) -> bool:
        return self.last_reviewed_at is None

    def is_due(self, as_of: datetime) -> bool:
        return self.next_review_at <= as_of

    def to_dict(self) -> ReviewStateDict:
        """
        Returns a JSON-serializable dictionary representation of the ReviewState object.

        This method is specifically useful for storing ReviewState objects in a database.

        Returns:
            A dictionary representation of the ReviewState object.
        """

        return {
            "card_id": self.card_id,
            "learner_id": self.learner_id,
            "ease_factor": self.ease_factor,
            "interval": self.interval,
            "repetitions": self.repetitions,
            "next_review_at": self.next_review_at.isoformat(),
            "last_reviewed_at": (
                self.last_reviewed_at.isoformat() if self.last_reviewed_at else None
            ),
            "last_quality": (
                int(self.last_quality) if self.last_quality is not None else None
            ),
            "history": self.history.to_list(),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewStateDict) -> Self:
        """
        Creates a ReviewState object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ReviewState object.

        Returns:
            A ReviewState object created from the provided dictionary.
        """

        return cls(
            card_id=str(source_dict["card_id"]),
            learner_id=str(source_dict["learner_id"]),
            ease_factor=float(source_dict["ease_factor"]),
            interval=int(source_dict["interval"]),
            repetitions=int(source_dict["repetitions"]),
            next_review_at=datetime.fromisoformat(source_dict["next_review_at"]),
            last_reviewed_at=(
                datetime.fromisoformat(source_dict["last_reviewed_at"])
                if source_dict["last_reviewed_at"]
                else None
            ),
            last_quality=(
                Quality(int(source_dict["last_quality"]))
                if source_dict["last_quality"] is not None
                else None
            ),
            history=ReviewHistory.from_list(source_dict["history"]),
            version=int(source_dict["version"]),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the ReviewState object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the ReviewState object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a ReviewState object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing ReviewState object.

        Returns:
            Self: A ReviewState object created from the JSON string.
        """

        source_dict: ReviewStateDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewState", "DEFAULT_EASE_FACTOR"]

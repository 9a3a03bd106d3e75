"""
sm2.review_log
--------------

This module defines the ReviewLog and ReviewHistory classes.

Classes:
    ReviewLog: Represents a single review of a card.
    ReviewHistory: The append-only, ordered log of a card's reviews.
"""

from __future__ import annotations
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict, overload
import json
from typing_extensions import Self
from sm2.quality import Quality


class ReviewLogDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewLog object.
    """

    review_datetime: str
    quality: int
    interval: int


@dataclass(frozen=True)
class ReviewLog:
    """
    Represents the log entry of a card that has been reviewed.

    Attributes:
        review_datetime: The date and time of the review.
        quality: The quality rating given during the review.
        interval: The interval, in days, the review scheduled the card for.
    """

    review_datetime: datetime
    quality: Quality
    interval: int

    def to_dict(self) -> ReviewLogDict:
        """
        Returns a JSON-serializable dictionary representation of the ReviewLog object.
        """

        return {
            "review_datetime": self.review_datetime.isoformat(),
            "quality": int(self.quality),
            "interval": self.interval,
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewLogDict) -> Self:
        """
        Creates a ReviewLog object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ReviewLog object.

        Returns:
            A ReviewLog object created from the provided dictionary.
        """

        return cls(
            review_datetime=datetime.fromisoformat(source_dict["review_datetime"]),
            quality=Quality(int(source_dict["quality"])),
            interval=int(source_dict["interval"]),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        source_dict: ReviewLogDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


@dataclass(frozen=True)
class ReviewHistory:
    """
    The ordered log of every review of a card.

    The history can only grow: append() returns a new ReviewHistory with the entry added at the
    end and leaves the original untouched. Entries are kept in chronological order.

    Attributes:
        entries: The review logs, oldest first.
    """

    entries: tuple[ReviewLog, ...] = ()

    def __post_init__(self) -> None:
        # accept any iterable but always store a tuple
        object.__setattr__(self, "entries", tuple(self.entries))

        for earlier, later in zip(self.entries, self.entries[1:]):
            if later.review_datetime < earlier.review_datetime:
                raise ValueError("review history entries must be in chronological order")

    def append(self, review_log: ReviewLog) -> ReviewHistory:
        """
        Returns a new history with the given review log added at the end.

        Raises:
            ValueError: If the review log is older than the latest entry.
        """

        if self.entries and review_log.review_datetime < self.entries[-1].review_datetime:
            raise ValueError(
                f"cannot append a review from {review_log.review_datetime.isoformat()} "
                f"after one from {self.entries[-1].review_datetime.isoformat()}"
            )

        return ReviewHistory(entries=self.entries + (review_log,))

    @property
    def latest(self) -> ReviewLog | None:
        return self.entries[-1] if self.entries else None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ReviewLog]:
        return iter(self.entries)

    @overload
    def __getitem__(self, index: int) -> ReviewLog: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[ReviewLog, ...]: ...

    def __getitem__(self, index: int | slice) -> ReviewLog | tuple[ReviewLog, ...]:
        return self.entries[index]

    def to_list(self) -> list[ReviewLogDict]:
        return [review_log.to_dict() for review_log in self.entries]

    @classmethod
    def from_list(cls, source_list: list[ReviewLogDict]) -> Self:
        return cls(
            entries=tuple(ReviewLog.from_dict(source_dict) for source_dict in source_list)
        )


__all__ = ["ReviewLog", "ReviewHistory"]

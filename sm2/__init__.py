"""
py-sm2
------

Py-SM2 is a Python implementation of the SuperMemo-2 (SM-2) scheduler algorithm, which can be used to develop spaced repetition systems.
"""

from sm2.scheduler import Scheduler, ReviewResult, compute
from sm2.quality import Quality, BUTTON_QUALITIES
from sm2.review_state import ReviewState
from sm2.review_log import ReviewLog, ReviewHistory
from sm2.due import DueSelection, select_due, count_due, in_collection
from sm2.streak import StreakRecord, record_study, streak_as_of
from sm2.maturity import is_mature, mature_card_ids, maturity_summary
from sm2.clock import Clock, SystemClock, FixedClock
from sm2.store import ReviewStateStore, InMemoryReviewStateStore
from sm2.service import ReviewService, StudySession
from sm2.exceptions import (
    SM2Error,
    InvalidQuality,
    StateNotFound,
    StateAlreadyExists,
    ConcurrentUpdate,
)

__all__ = [
    "Scheduler",
    "ReviewResult",
    "compute",
    "Quality",
    "BUTTON_QUALITIES",
    "ReviewState",
    "ReviewLog",
    "ReviewHistory",
    "DueSelection",
    "select_due",
    "count_due",
    "in_collection",
    "StreakRecord",
    "record_study",
    "streak_as_of",
    "is_mature",
    "mature_card_ids",
    "maturity_summary",
    "Clock",
    "SystemClock",
    "FixedClock",
    "ReviewStateStore",
    "InMemoryReviewStateStore",
    "ReviewService",
    "StudySession",
    "SM2Error",
    "InvalidQuality",
    "StateNotFound",
    "StateAlreadyExists",
    "ConcurrentUpdate",
]

from sm2.service import ReviewService
from sm2.store import InMemoryReviewStateStore
from sm2.scheduler import Scheduler
from sm2.clock import FixedClock, SystemClock
from sm2.quality import Quality
from sm2.due import in_collection
from sm2.exceptions import (
    ConcurrentUpdate,
    InvalidQuality,
    StateAlreadyExists,
    StateNotFound,
)

from datetime import date, datetime, timedelta, timezone
import threading
import pytest
from structlog.testing import capture_logs

NOW = datetime(2024, 1, 1, 12, 0, 0, 0, timezone.utc)


class RacingStore(InMemoryReviewStateStore):
    """Lets a competing review win the race for the next `races` saves."""

    def __init__(self, races):
        super().__init__()
        self.races = races

    def save(self, state):
        if self.races > 0:
            self.races -= 1
            competing = super().load(state.card_id, state.learner_id)
            super().save(competing)

        return super().save(state)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store():
    return InMemoryReviewStateStore()


@pytest.fixture
def service(store, clock):
    return ReviewService(store=store, clock=clock)


class TestInMemoryReviewStateStore:
    def test_introduce_and_load(self, store):
        introduced = store.introduce(card_id="c1", learner_id="l1", now=NOW)
        loaded = store.load(card_id="c1", learner_id="l1")

        assert introduced == loaded
        assert loaded.next_review_at == NOW
        assert loaded.ease_factor == 2.5
        assert loaded.version == 0

    def test_introduce_twice(self, store):
        store.introduce(card_id="c1", learner_id="l1", now=NOW)

        with pytest.raises(StateAlreadyExists):
            store.introduce(card_id="c1", learner_id="l1", now=NOW)

        # the same card for another learner is a different state
        store.introduce(card_id="c1", learner_id="l2", now=NOW)

    def test_load_missing(self, store):
        with pytest.raises(StateNotFound) as excinfo:
            store.load(card_id="missing", learner_id="l1")

        assert excinfo.value.card_id == "missing"
        assert excinfo.value.learner_id == "l1"

        # StateNotFound is also a LookupError
        with pytest.raises(LookupError):
            store.load(card_id="missing", learner_id="l1")

    def test_save_bumps_version(self, store):
        state = store.introduce(card_id="c1", learner_id="l1", now=NOW)
        state.interval = 6

        saved = store.save(state)

        assert saved.version == 1
        assert store.load(card_id="c1", learner_id="l1").interval == 6

    def test_save_stale_state(self, store):
        state = store.introduce(card_id="c1", learner_id="l1", now=NOW)
        store.save(state)

        with pytest.raises(ConcurrentUpdate) as excinfo:
            store.save(state)

        assert excinfo.value.expected_version == 0
        assert excinfo.value.actual_version == 1

    def test_loaded_states_are_copies(self, store):
        store.introduce(card_id="c1", learner_id="l1", now=NOW)

        state = store.load(card_id="c1", learner_id="l1")
        state.interval = 99

        assert store.load(card_id="c1", learner_id="l1").interval == 0

    def test_states_for(self, store):
        store.introduce(card_id="c1", learner_id="l1", now=NOW)
        store.introduce(card_id="c2", learner_id="l1", now=NOW)
        store.introduce(card_id="c1", learner_id="l2", now=NOW)

        assert sorted(state.card_id for state in store.states_for("l1")) == ["c1", "c2"]
        assert [
            state.card_id for state in store.states_for("l1", scope=in_collection({"c2"}))
        ] == ["c2"]
        assert store.states_for("nobody") == []

    def test_delete(self, store):
        store.introduce(card_id="c1", learner_id="l1", now=NOW)

        store.delete(card_id="c1", learner_id="l1")

        with pytest.raises(StateNotFound):
            store.load(card_id="c1", learner_id="l1")

        with pytest.raises(StateNotFound):
            store.delete(card_id="c1", learner_id="l1")


class TestReviewService:
    def test_submit_review(self, service, store):
        service.introduce_card(card_id="c1", learner_id="l1")

        state = service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Good)

        assert state.repetitions == 1
        assert state.interval == 1
        assert state.last_reviewed_at == NOW
        assert state.next_review_at == NOW + timedelta(days=1)
        assert state.version == 1
        assert store.load(card_id="c1", learner_id="l1") == state

    def test_submit_review_for_missing_state(self, service, store):
        with pytest.raises(StateNotFound):
            service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Good)

        # missing state is never created on the fly
        assert store.states_for("l1") == []
        assert service.streak("l1").current_streak == 0

    def test_submit_invalid_quality(self, service, store):
        service.introduce_card(card_id="c1", learner_id="l1")

        with pytest.raises(InvalidQuality):
            service.submit_review(card_id="c1", learner_id="l1", quality=6)

        with pytest.raises(InvalidQuality):
            service.submit_review(card_id="c1", learner_id="l1", quality=-1)

        assert store.load(card_id="c1", learner_id="l1").version == 0

    def test_due_cards(self, service, clock):
        for card_id in ("c1", "c2", "c3"):
            service.introduce_card(card_id=card_id, learner_id="l1")

        clock.advance(timedelta(minutes=5))
        service.submit_review(card_id="c2", learner_id="l1", quality=Quality.Good)

        assert list(service.due_cards("l1")) == ["c1", "c3"]
        assert list(service.due_cards("l1", limit=1)) == ["c1"]
        assert list(service.due_cards("l1", scope=in_collection({"c3"}))) == ["c3"]

        clock.advance(timedelta(days=1))

        # c2 is now due too, but later than the two never-reviewed cards
        assert list(service.due_cards("l1")) == ["c1", "c3", "c2"]

    def test_streak_is_recorded(self, service, clock):
        service.introduce_card(card_id="c1", learner_id="l1")
        service.introduce_card(card_id="c2", learner_id="l1")

        service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Good)
        service.submit_review(card_id="c2", learner_id="l1", quality=Quality.Again)

        assert service.streak("l1").current_streak == 1

        clock.advance(timedelta(days=1))
        service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Good)

        streak = service.streak("l1")
        assert streak.current_streak == 2
        assert streak.longest_streak == 2
        assert streak.last_study_date == date(2024, 1, 2)
        assert service.current_streak("l1") == 2

        clock.advance(timedelta(days=3))
        assert service.current_streak("l1") == 0

    def test_study_day_follows_clock_time_zone(self, store):
        # 23:30 UTC is already the next day in UTC+2
        clock = FixedClock(
            datetime(2024, 1, 1, 23, 30, 0, 0, timezone.utc),
            tz=timezone(timedelta(hours=2)),
        )
        service = ReviewService(store=store, clock=clock)
        service.introduce_card(card_id="c1", learner_id="l1")

        service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Good)

        assert service.streak("l1").last_study_date == date(2024, 1, 2)

    def test_retries_after_losing_a_race(self, clock):
        store = RacingStore(races=2)
        service = ReviewService(store=store, clock=clock, max_retries=3)
        service.introduce_card(card_id="c1", learner_id="l1")

        with capture_logs() as cap_logs:
            state = service.submit_review(
                card_id="c1", learner_id="l1", quality=Quality.Good
            )

        assert state.repetitions == 1
        # two competing saves plus ours
        assert state.version == 3
        retries = [log for log in cap_logs if log["event"] == "review_conflict_retry"]
        assert [log["attempt"] for log in retries] == [1, 2]

    def test_gives_up_after_max_retries(self, clock):
        store = RacingStore(races=5)
        service = ReviewService(store=store, clock=clock, max_retries=2)
        service.introduce_card(card_id="c1", learner_id="l1")

        with pytest.raises(ConcurrentUpdate):
            service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Good)

        assert service.streak("l1").current_streak == 0

    def test_concurrent_submissions_are_not_lost(self, store):
        service = ReviewService(store=store, clock=SystemClock(), max_retries=100)
        service.introduce_card(card_id="c1", learner_id="l1")

        def submit():
            for _ in range(5):
                service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Hard)

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        state = store.load(card_id="c1", learner_id="l1")
        assert len(state.history) == 40
        assert state.version == 40
        assert state.ease_factor == 1.3

    def test_submit_review_logs(self, service):
        service.introduce_card(card_id="c1", learner_id="l1")

        with capture_logs() as cap_logs:
            service.submit_review(card_id="c1", learner_id="l1", quality=Quality.Hard)

        submitted = [log for log in cap_logs if log["event"] == "review_submitted"]
        assert len(submitted) == 1
        assert submitted[0]["log_level"] == "info"
        assert submitted[0]["card_id"] == "c1"
        assert submitted[0]["quality"] == 2
        assert submitted[0]["interval"] == 1

    def test_custom_scheduler(self, store, clock):
        service = ReviewService(
            store=store, scheduler=Scheduler(initial_ease_factor=2.0), clock=clock
        )

        state = service.introduce_card(card_id="c1", learner_id="l1")

        assert state.ease_factor == 2.0

    def test_invalid_max_retries(self, store):
        with pytest.raises(ValueError):
            ReviewService(store=store, max_retries=-1)


class TestStudySession:
    def test_session_summary(self, service):
        for card_id in ("c1", "c2", "c3", "c4"):
            service.introduce_card(card_id=card_id, learner_id="l1")

        session = service.start_session("l1")
        assert session.accuracy == 0.0

        session.submit("c1", Quality.Good)
        session.submit("c2", Quality.Again)
        session.submit("c3", Quality.Easy)
        session.submit("c4", Quality.Hard)

        assert session.cards_studied == 4
        assert session.correct_answers == 2
        assert session.accuracy == 0.5

    def test_failed_submission_is_not_counted(self, service):
        session = service.start_session("l1")

        with pytest.raises(StateNotFound):
            session.submit("missing", Quality.Good)

        assert session.cards_studied == 0

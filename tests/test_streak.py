from sm2.streak import StreakRecord, record_study, streak_as_of

from datetime import date, timedelta
import json
import pytest

DAY = date(2024, 1, 1)


class TestStreak:
    def test_first_study_day(self):
        streak = record_study(StreakRecord(), DAY)

        assert streak.current_streak == 1
        assert streak.longest_streak == 1
        assert streak.last_study_date == DAY
        assert streak.study_dates == frozenset({DAY})

    def test_same_day_is_a_no_op(self):
        streak = record_study(StreakRecord(), DAY)

        again = record_study(streak, DAY)
        and_again = record_study(again, DAY)

        assert again == streak
        assert and_again == streak
        assert and_again.current_streak == 1

    def test_consecutive_days_extend_the_streak(self):
        streak = StreakRecord()
        for offset in range(5):
            streak = record_study(streak, DAY + timedelta(days=offset))

        assert streak.current_streak == 5
        assert streak.longest_streak == 5
        assert streak.last_study_date == DAY + timedelta(days=4)
        assert len(streak.study_dates) == 5

    def test_gap_resets_the_streak(self):
        streak = StreakRecord()
        for offset in range(3):
            streak = record_study(streak, DAY + timedelta(days=offset))

        streak = record_study(streak, DAY + timedelta(days=4))

        assert streak.current_streak == 1
        assert streak.longest_streak == 3
        assert streak.last_study_date == DAY + timedelta(days=4)

    def test_longest_streak_never_decreases(self):
        streak = StreakRecord()
        study_days = [0, 1, 2, 3, 10, 11, 20, 21, 22, 23, 24, 40]

        longest = []
        for offset in study_days:
            streak = record_study(streak, DAY + timedelta(days=offset))
            longest.append(streak.longest_streak)

        assert longest == sorted(longest)
        assert streak.longest_streak == 5
        assert streak.current_streak == 1

    def test_earlier_day_only_fills_in_the_calendar(self):
        streak = record_study(StreakRecord(), DAY + timedelta(days=5))

        backfilled = record_study(streak, DAY)

        assert backfilled.current_streak == 1
        assert backfilled.last_study_date == DAY + timedelta(days=5)
        assert backfilled.study_dates == frozenset({DAY, DAY + timedelta(days=5)})

    def test_record_study_does_not_modify_input(self):
        streak = record_study(StreakRecord(), DAY)

        record_study(streak, DAY + timedelta(days=1))

        assert streak.current_streak == 1
        assert streak.study_dates == frozenset({DAY})

        with pytest.raises(AttributeError):
            streak.current_streak = 10

    def test_streak_as_of(self):
        streak = record_study(record_study(StreakRecord(), DAY), DAY + timedelta(days=1))

        assert streak_as_of(StreakRecord(), DAY) == 0
        assert streak_as_of(streak, DAY + timedelta(days=1)) == 2
        assert streak_as_of(streak, DAY + timedelta(days=2)) == 2
        assert streak_as_of(streak, DAY + timedelta(days=3)) == 0

    def test_StreakRecord_json_serialize(self):
        streak = StreakRecord()
        for offset in (0, 1, 3):
            streak = record_study(streak, DAY + timedelta(days=offset))

        assert type(json.dumps(streak.to_dict())) is str
        assert StreakRecord.from_dict(streak.to_dict()) == streak
        assert StreakRecord.from_json(streak.to_json()) == streak
        assert streak.to_dict()["study_dates"] == [
            "2024-01-01",
            "2024-01-02",
            "2024-01-04",
        ]

        assert StreakRecord.from_json(StreakRecord().to_json()) == StreakRecord()

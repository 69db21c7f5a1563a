"""
Tests pour le streak et le cycle d'engagement.
"""
import pytest
from datetime import date, timedelta

from app.domain.errors import UserNotFoundError
from app.domain.services.streak_service import StreakState, advance_streak, streak_tracker

from conftest import NOW


TODAY = NOW.date()
YESTERDAY = TODAY - timedelta(days=1)


def state(**fields):
    fields.setdefault("commitment_start_date", NOW - timedelta(days=5))
    return StreakState(**fields)


class TestAdvanceStreak:
    """Tests pour la fonction pure advance_streak."""

    def test_first_active_day(self):
        new_state = advance_streak(state(), NOW)
        assert new_state.current_streak == 1
        assert new_state.last_active_date == TODAY
        assert new_state.streak_dates == (TODAY.isoformat(),)

    def test_same_day_is_idempotent(self):
        first = advance_streak(state(current_streak=3, last_active_date=YESTERDAY), NOW)
        second = advance_streak(first, NOW.replace(hour=22))
        assert first.current_streak == 4
        assert second.current_streak == 4
        assert second.streak_dates == first.streak_dates

    def test_consecutive_day_increments(self):
        new_state = advance_streak(state(current_streak=7, last_active_date=YESTERDAY), NOW)
        assert new_state.current_streak == 8
        assert new_state.last_active_date == TODAY

    @pytest.mark.parametrize("gap", [2, 3, 30])
    def test_gap_resets_to_one(self, gap):
        new_state = advance_streak(state(current_streak=12, last_active_date=TODAY - timedelta(days=gap)), NOW)
        assert new_state.current_streak == 1
        assert new_state.last_active_date == TODAY

    def test_last_active_in_future_is_noop(self):
        tomorrow = TODAY + timedelta(days=1)
        new_state = advance_streak(state(current_streak=4, last_active_date=tomorrow), NOW)
        assert new_state.current_streak == 4
        assert new_state.last_active_date == tomorrow

    def test_streak_dates_have_no_duplicates(self):
        existing = (YESTERDAY.isoformat(), TODAY.isoformat())
        new_state = advance_streak(state(current_streak=2, last_active_date=TODAY, streak_dates=existing), NOW)
        assert new_state.streak_dates == existing

    def test_cycle_completion_success(self):
        new_state = advance_streak(
            state(
                current_streak=19,
                last_active_date=YESTERDAY,
                streak_dates=(YESTERDAY.isoformat(),),
                commitment_start_date=NOW - timedelta(days=25),
                streak_completions=2,
            ),
            NOW,
        )
        assert new_state.cycle_completed is True
        assert new_state.cycle_succeeded is True
        assert new_state.current_streak == 0
        assert new_state.streak_completions == 3
        assert new_state.streak_dates == ()
        assert new_state.last_active_date is None
        assert new_state.commitment_start_date == NOW

    def test_cycle_fails_after_mid_cycle_reset(self):
        """Actif les jours 2 à 20 seulement : streak 19 < 20, le cycle échoue."""
        start = NOW - timedelta(days=19)
        new_state = advance_streak(
            state(current_streak=18, last_active_date=YESTERDAY, commitment_start_date=start),
            NOW,
        )
        assert new_state.cycle_completed is True
        assert new_state.cycle_succeeded is False
        assert new_state.streak_completions == 0
        assert new_state.current_streak == 0
        assert new_state.commitment_start_date == NOW

    def test_cycle_not_over_before_goal(self):
        start = NOW - timedelta(days=18)  # jour 19 du cycle
        new_state = advance_streak(
            state(current_streak=18, last_active_date=YESTERDAY, commitment_start_date=start),
            NOW,
        )
        assert new_state.cycle_completed is False
        assert new_state.current_streak == 19

    def test_custom_goal(self):
        new_state = advance_streak(
            state(current_streak=4, last_active_date=YESTERDAY,
                  commitment_start_date=NOW - timedelta(days=4), streak_goal=5),
            NOW,
        )
        assert new_state.cycle_succeeded is True
        assert new_state.streak_completions == 1


class TestStreakTracker:
    """Tests pour StreakTracker.record_active_day (persistance)."""

    def test_persists_new_state(self, session, user, user_id):
        user.current_streak = 5
        user.last_active_date = YESTERDAY
        session.add(user)
        session.commit()

        result = streak_tracker.record_active_day(session, user_id, NOW)

        session.refresh(user)
        assert result.current_streak == 6
        assert user.current_streak == 6
        assert user.last_active_date == TODAY
        assert user.streak_dates == [TODAY.isoformat()]

    def test_repeated_call_same_day(self, session, user, user_id):
        streak_tracker.record_active_day(session, user_id, NOW)
        streak_tracker.record_active_day(session, user_id, NOW + timedelta(hours=2))

        session.refresh(user)
        assert user.current_streak == 1
        assert user.streak_dates == [TODAY.isoformat()]

    def test_cycle_completion_persisted(self, session, user, user_id):
        user.commitment_start_date = NOW - timedelta(days=25)
        user.current_streak = 19
        user.last_active_date = YESTERDAY
        user.streak_dates = [YESTERDAY.isoformat()]
        session.add(user)
        session.commit()

        streak_tracker.record_active_day(session, user_id, NOW)

        session.refresh(user)
        assert user.current_streak == 0
        assert user.streak_completions == 1
        assert user.streak_dates == []
        assert user.last_active_date is None
        assert user.commitment_start_date.date() == TODAY

    def test_unknown_user(self, session):
        with pytest.raises(UserNotFoundError):
            streak_tracker.record_active_day(session, "00000000-0000-0000-0000-000000000000", NOW)

"""
Tests pour l'événement "done for today" : streak -> complétion quotidienne -> badges.
"""
import threading
import pytest
from datetime import timedelta
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.domain.entities import WorkoutUpdate
from app.domain.errors import ProgressBusyError, TransientPersistenceError, UserNotFoundError
from app.domain.services.badge_service import badge_service
from app.domain.services.daily_completion_service import daily_completion_aggregator
from app.domain.services.progress_service import progress_service
from app.domain.services.streak_service import streak_tracker
from app.domain.services.workout_service import workout_service

from conftest import NOW, add_workout, make_activity, make_set


YESTERDAY = NOW - timedelta(days=1)


def transient_error():
    return OperationalError("UPDATE user", {}, Exception("database is locked"))


def done_for_today(workout, completed_at=NOW, statuses=("completed",)):
    return WorkoutUpdate(
        day=workout.day,
        title=workout.title,
        activities=[make_activity(sets=[make_set(status=s) for s in statuses])],
        last_completed_date=completed_at,
    )


@pytest.fixture(autouse=True)
def no_backoff():
    """Pas d'attente entre les tentatives."""
    with patch("tenacity.nap.time.sleep"):
        yield


class TestDoneForToday:

    def test_full_sequence(self, session, user, user_id, catalog):
        workout = add_workout(session, user, activities=[make_activity()])

        updated = workout_service.update(
            session, user_id, workout.id, done_for_today(workout, statuses=("completed", "partial")), now=NOW
        )

        session.refresh(user)
        assert updated.last_completed_date == NOW
        assert user.current_streak == 1
        assert user.last_active_date == NOW.date()
        assert user.daily_completions == {NOW.date().isoformat(): 75}
        assert user.badges == []

    def test_second_press_same_day(self, session, user, user_id):
        workout = add_workout(session, user, activities=[make_activity()])
        workout_service.update(session, user_id, workout.id, done_for_today(workout), now=NOW)
        workout_service.update(
            session, user_id, workout.id, done_for_today(workout, statuses=("partial",)),
            now=NOW + timedelta(hours=1),
        )

        session.refresh(user)
        assert user.current_streak == 1
        assert user.streak_dates == [NOW.date().isoformat()]
        assert user.daily_completions == {NOW.date().isoformat(): 50}

    def test_backdated_completion_skips_progress(self, session, user, user_id):
        workout = add_workout(session, user, activities=[make_activity()])

        updated = workout_service.update(
            session, user_id, workout.id, done_for_today(workout, completed_at=YESTERDAY), now=NOW
        )

        session.refresh(user)
        assert updated.last_completed_date == YESTERDAY
        assert user.current_streak == 0
        assert user.daily_completions == {}

    def test_cycle_completion_grants_streak_badge(self, session, user, user_id, catalog):
        user.commitment_start_date = NOW - timedelta(days=25)
        user.current_streak = 19
        user.last_active_date = YESTERDAY.date()
        session.add(user)
        session.commit()
        workout = add_workout(session, user, activities=[make_activity()])

        workout_service.update(session, user_id, workout.id, done_for_today(workout), now=NOW)

        session.refresh(user)
        assert user.current_streak == 0
        assert user.streak_completions == 1
        assert user.badges == ["Streak Bronze"]
        # La complétion quotidienne reste enregistrée malgré la fin du cycle
        assert user.daily_completions == {NOW.date().isoformat(): 100}


class TestDegradedSteps:

    def test_daily_completion_failure_keeps_streak(self, session, user, user_id):
        with patch.object(daily_completion_aggregator, "record_day", side_effect=transient_error()) as record_day, \
                patch("app.domain.services.progress_service.report_degradation") as report:
            outcome = progress_service.record_completion(session, user_id, NOW)

        session.refresh(user)
        assert record_day.call_count == 3
        assert outcome.daily_completion_failed is True
        assert outcome.streak.current_streak == 1
        assert user.current_streak == 1
        report.assert_called_once()

    def test_badge_failure_is_not_fatal(self, session, user, user_id, catalog):
        user.weekly_goal_completions = 2
        session.add(user)
        session.commit()

        with patch.object(badge_service, "evaluate", side_effect=transient_error()), \
                patch("app.domain.services.progress_service.report_degradation") as report:
            outcome = progress_service.record_completion(session, user_id, NOW)

        assert outcome.badges_failed is True
        assert outcome.new_badges == []
        report.assert_called_once()

        # Rattrapé à la prochaine évaluation
        new_badges, failed = progress_service.evaluate_badges(session, user_id)
        assert failed is False
        assert new_badges == ["Weekly Bronze"]

    def test_streak_failure_is_retryable_error(self, session, user, user_id):
        with patch.object(streak_tracker, "record_active_day", side_effect=transient_error()):
            with pytest.raises(TransientPersistenceError) as exc_info:
                progress_service.record_completion(session, user_id, NOW)

        assert exc_info.value.retryable is True
        assert exc_info.value.to_dict()["code"] == "transient_failure"

    def test_transient_error_then_success(self, session, user, user_id):
        real_record = streak_tracker.record_active_day
        calls = []

        def flaky(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                raise transient_error()
            return real_record(*args, **kwargs)

        with patch.object(streak_tracker, "record_active_day", side_effect=flaky):
            outcome = progress_service.record_completion(session, user_id, NOW)

        assert len(calls) == 2
        assert outcome.streak.current_streak == 1


class TestConcurrentCompletion:

    def test_second_done_for_today_is_rejected_while_first_holds_the_lock(self, session, user, user_id):
        workout = add_workout(session, user, activities=[make_activity()])
        entered = threading.Event()
        release = threading.Event()

        def first_request():
            with progress_service.lock_manager.hold(user_id):
                entered.set()
                release.wait(2)

        holder = threading.Thread(target=first_request)
        holder.start()
        entered.wait(2)
        try:
            with patch.object(progress_service.lock_manager, "wait_timeout", 0.05):
                with pytest.raises(ProgressBusyError):
                    workout_service.update(session, user_id, workout.id, done_for_today(workout), now=NOW)
        finally:
            release.set()
            holder.join(2)

        session.refresh(workout)
        session.refresh(user)
        assert workout.last_completed_date is None
        assert user.current_streak == 0
        assert workout_service.get_history(session, user_id, now=NOW) == []

        # Verrou libéré : la même requête passe
        workout_service.update(session, user_id, workout.id, done_for_today(workout), now=NOW)
        session.refresh(user)
        assert user.current_streak == 1

    def test_goal_update_shares_the_same_lock(self, session, user, user_id):
        from app.domain.entities import GoalProgressUpdate
        from app.domain.services.goal_service import goal_service

        entered = threading.Event()
        release = threading.Event()

        def first_request():
            with progress_service.lock_manager.hold(user_id):
                entered.set()
                release.wait(2)

        holder = threading.Thread(target=first_request)
        holder.start()
        entered.wait(2)
        try:
            with patch.object(progress_service.lock_manager, "wait_timeout", 0.05):
                with pytest.raises(ProgressBusyError):
                    goal_service.update_goals(session, user_id, GoalProgressUpdate(weekly_goal="10k steps"))
        finally:
            release.set()
            holder.join(2)


class TestProfile:

    def test_profile_exposes_counters(self, session, user, user_id):
        progress_service.record_completion(session, user_id, NOW)

        profile = progress_service.get_profile(session, user_id)

        assert profile.current_streak == 1
        assert profile.streak_dates == [NOW.date().isoformat()]
        assert profile.badges == []
        assert profile.streak_goal == 20

    def test_unknown_user(self, session):
        with pytest.raises(UserNotFoundError):
            progress_service.get_profile(session, "00000000-0000-0000-0000-000000000000")

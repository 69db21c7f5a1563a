"""
Tests pour le stockage des dates (UTC naïf) des entités.
"""
import pytest
from datetime import timedelta

from sqlalchemy import DateTime

from app.domain.entities import User, Workout, WorkoutLog
from app.domain.services.workout_service import workout_service

from conftest import NOW, add_workout, make_activity, make_set


class TestNaiveDatetimeColumns:

    @pytest.mark.parametrize("model", [User, Workout, WorkoutLog])
    def test_datetime_columns_are_plain_naive(self, model):
        columns = [c for c in model.__table__.columns if isinstance(c.type, DateTime)]
        assert columns
        for column in columns:
            assert type(column.type) is DateTime, column.name
            assert column.type.timezone is False, column.name

    def test_naive_values_written_and_read_back(self, session, user):
        completed_at = NOW - timedelta(hours=20)
        workout = add_workout(session, user, activities=[make_activity()], last_completed_date=completed_at)

        session.expire_all()
        stored = session.get(Workout, workout.id)

        assert stored.last_completed_date == completed_at
        assert stored.last_completed_date.tzinfo is None
        assert session.get(User, user.id).commitment_start_date == NOW

    def test_rollover_commit_on_installed_sqlmodel(self, session, user, user_id):
        """Insertion puis bascule d'un workout terminé 20 h plus tôt (la veille)."""
        add_workout(
            session, user,
            activities=[make_activity(sets=[make_set(status="completed", next_suggested_value=17)])],
            last_completed_date=NOW - timedelta(hours=20),
        )

        rolled = workout_service.list_workouts(session, user_id, now=NOW)[0]

        assert rolled.last_completed_date is None
        assert rolled.last_reset_date == NOW
        assert rolled.activities[0]["sets"][0]["value"] == 17

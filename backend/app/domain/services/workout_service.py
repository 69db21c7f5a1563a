"""
Service des workouts : CRUD, lecture avec rollover, "done for today",
acceptation/rejet des suggestions et historique.
"""
import logging
from sqlmodel import Session, select
from uuid import UUID
from datetime import datetime, timedelta
from typing import Optional, List

from app.core.clock import day_bounds, local_date, to_utc_naive
from app.core.settings import get_settings
from app.domain.entities import (
    User, Workout, WorkoutCreate, WorkoutUpdate, WorkoutLog, WorkoutActivity, SetStatus,
)
from app.domain.errors import (
    NoSuggestionError, SetNotFoundError, UserNotFoundError, WorkoutNotFoundError,
)
from app.domain.services.progress_service import progress_service, ProgressOutcome
from app.domain.services.rollover_service import rollover_evaluator

logger = logging.getLogger(__name__)

LOGGED_STATUSES = (SetStatus.COMPLETED, SetStatus.PARTIAL)


def build_workout_logs(workout: Workout, logged_at: datetime) -> List[WorkoutLog]:
    """Une ligne d'historique par série terminée ou partielle."""
    logs = []
    for activity in workout.parsed_activities():
        for workout_set in activity.sets:
            if workout_set.status not in LOGGED_STATUSES:
                continue
            logs.append(WorkoutLog(
                user_id=workout.user_id,
                workout_id=workout.id,
                date=logged_at,
                workout_title=workout.title,
                activity_name=activity.name,
                parameter=workout_set.parameter.value,
                value=workout_set.value,
                unit=workout_set.unit,
            ))
    return logs


class WorkoutService:

    def create(self, session: Session, user_id: str, workout_data: WorkoutCreate) -> Workout:
        if not session.get(User, UUID(user_id)):
            raise UserNotFoundError(f"Utilisateur {user_id} introuvable")
        workout = Workout(
            user_id=UUID(user_id),
            day=workout_data.day,
            title=workout_data.title,
            activities=[a.model_dump(mode="json") for a in workout_data.activities],
        )
        session.add(workout)
        session.commit()
        session.refresh(workout)
        return workout

    def list_workouts(self, session: Session, user_id: str, now: Optional[datetime] = None) -> List[Workout]:
        """Workouts de l'utilisateur, basculés au jour courant si nécessaire."""
        now = now or datetime.utcnow()
        workouts = session.exec(
            select(Workout)
            .where(Workout.user_id == UUID(user_id))
            .order_by(Workout.created_at)
        ).all()
        return rollover_evaluator.evaluate(session, workouts, now)

    def get(self, session: Session, user_id: str, workout_id: UUID) -> Workout:
        workout = session.exec(
            select(Workout).where(
                Workout.id == workout_id,
                Workout.user_id == UUID(user_id),
            )
        ).first()
        if not workout:
            raise WorkoutNotFoundError("Workout not found or unauthorized")
        return workout

    def update(
        self,
        session: Session,
        user_id: str,
        workout_id: UUID,
        workout_updates: WorkoutUpdate,
        now: Optional[datetime] = None,
    ) -> Workout:
        """
        Remplace day/title/activities et, si fourni, last_completed_date.

        Un last_completed_date tombant aujourd'hui déclenche l'événement de
        progression (streak -> complétion quotidienne -> badges) après
        l'écriture du workout et de son historique.
        """
        now = now or datetime.utcnow()
        fields = workout_updates.model_fields_set
        completed_at = workout_updates.last_completed_date
        completes_today = (
            "last_completed_date" in fields
            and completed_at is not None
            and local_date(completed_at) == local_date(now)
        )

        if not completes_today:
            workout = self.get(session, user_id, workout_id)
            self._apply_updates(workout, workout_updates, fields)
            session.add(workout)
            session.commit()
            session.refresh(workout)
            return workout

        with progress_service.lock_manager.hold(user_id):
            workout = self.get(session, user_id, workout_id)
            self._apply_updates(workout, workout_updates, fields)
            session.add(workout)
            self._replace_day_logs(session, workout, now)
            session.commit()
            session.refresh(workout)

            outcome: ProgressOutcome = progress_service.run_completion_steps(session, user_id, now)
            logger.info(
                f"Workout {workout_id} terminé pour {user_id}: streak={outcome.streak.current_streak}, "
                f"score={outcome.day_score}"
            )
            session.refresh(workout)
            return workout

    def delete(self, session: Session, user_id: str, workout_id: UUID) -> dict:
        workout = self.get(session, user_id, workout_id)
        session.delete(workout)
        session.commit()
        return {"message": "Workout deleted successfully"}

    # ---- Suggestions ----

    def accept_suggestion(
        self, session: Session, user_id: str, workout_id: UUID, activity_id: str, set_index: int
    ) -> Workout:
        """Conserve la valeur suggérée et oublie la valeur précédente."""
        return self._resolve_suggestion(session, user_id, workout_id, activity_id, set_index, accept=True)

    def reject_suggestion(
        self, session: Session, user_id: str, workout_id: UUID, activity_id: str, set_index: int
    ) -> Workout:
        """Restaure la valeur active avant l'application de la suggestion."""
        return self._resolve_suggestion(session, user_id, workout_id, activity_id, set_index, accept=False)

    # ---- Historique ----

    def get_history(
        self, session: Session, user_id: str, days: Optional[int] = None, now: Optional[datetime] = None
    ) -> List[WorkoutLog]:
        days = days or get_settings().HISTORY_DEFAULT_DAYS
        end_date = to_utc_naive(now or datetime.utcnow())
        start_date = end_date - timedelta(days=days)
        return session.exec(
            select(WorkoutLog)
            .where(
                WorkoutLog.user_id == UUID(user_id),
                WorkoutLog.date >= start_date,
                WorkoutLog.date <= end_date,
            )
            .order_by(WorkoutLog.date)
        ).all()

    # ---- Helpers ----

    def _apply_updates(self, workout: Workout, workout_updates: WorkoutUpdate, fields: set) -> None:
        workout.day = workout_updates.day
        workout.title = workout_updates.title
        workout.activities = [a.model_dump(mode="json") for a in workout_updates.activities]
        if "last_completed_date" in fields:
            completed_at = workout_updates.last_completed_date
            workout.last_completed_date = to_utc_naive(completed_at) if completed_at else None
        workout.updated_at = datetime.utcnow()

    def _replace_day_logs(self, session: Session, workout: Workout, now: datetime) -> None:
        """Remplace l'historique du jour pour ce workout (un second "done" ne duplique pas)."""
        logged_at = to_utc_naive(now)
        start, end = day_bounds(local_date(now))
        existing = session.exec(
            select(WorkoutLog).where(
                WorkoutLog.workout_id == workout.id,
                WorkoutLog.date >= start,
                WorkoutLog.date < end,
            )
        ).all()
        for log in existing:
            session.delete(log)
        for log in build_workout_logs(workout, logged_at):
            session.add(log)

    def _resolve_suggestion(
        self,
        session: Session,
        user_id: str,
        workout_id: UUID,
        activity_id: str,
        set_index: int,
        accept: bool,
    ) -> Workout:
        workout = self.get(session, user_id, workout_id)
        activities: List[WorkoutActivity] = workout.parsed_activities()

        activity = next((a for a in activities if a.id == activity_id), None)
        if activity is None or not 0 <= set_index < len(activity.sets):
            raise SetNotFoundError(f"Série {activity_id}[{set_index}] introuvable")

        workout_set = activity.sets[set_index]
        if not workout_set.suggestion_applied:
            raise NoSuggestionError("Aucune suggestion appliquée sur cette série")

        if not accept and workout_set.previous_value is not None:
            workout_set.value = workout_set.previous_value
        workout_set.previous_value = None
        workout_set.suggestion_applied = False

        workout.activities = [a.model_dump(mode="json") for a in activities]
        workout.updated_at = datetime.utcnow()
        session.add(workout)
        session.commit()
        session.refresh(workout)
        return workout


workout_service = WorkoutService()

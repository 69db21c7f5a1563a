"""
Service de Rollover - Domain Layer
Bascule paresseuse d'un workout vers un nouveau jour calendaire.

Aucune tâche planifiée : la bascule est détectée et appliquée à la lecture
suivante des workouts de l'utilisateur.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session

from app.core.clock import local_date, to_utc_naive
from app.domain.entities.workout import Workout, WorkoutActivity, SetStatus, normalize_suggestion

logger = logging.getLogger(__name__)


def needs_rollover(last_completed_date: Optional[datetime], now: datetime, tz_name: Optional[str] = None) -> bool:
    """Vrai si le jour calendaire de `now` est strictement après celui de la dernière complétion."""
    if last_completed_date is None:
        return False
    return local_date(now, tz_name) > local_date(last_completed_date, tz_name)


def rollover_activities(activities: List[WorkoutActivity]) -> List[WorkoutActivity]:
    """
    Remet les séries à 'incomplete' et applique les suggestions en attente.

    Fonction pure : retourne de nouvelles activités, les entrées ne sont pas modifiées.
    """
    rolled = []
    for activity in activities:
        activity = activity.model_copy(deep=True)
        for workout_set in activity.sets:
            if workout_set.status != SetStatus.INCOMPLETE:
                workout_set.status = SetStatus.INCOMPLETE

            suggestion = normalize_suggestion(workout_set.next_suggested_value)
            if suggestion is not None:
                workout_set.previous_value = workout_set.value
                workout_set.value = suggestion
                workout_set.suggestion_applied = True
            workout_set.next_suggested_value = None
        rolled.append(activity)
    return rolled


def rollover_workout(workout: Workout, now: datetime, tz_name: Optional[str] = None) -> bool:
    """Applique la bascule sur l'entité si nécessaire. Retourne True si le workout a changé."""
    if not needs_rollover(workout.last_completed_date, now, tz_name):
        return False

    rolled = rollover_activities(workout.parsed_activities())
    workout.activities = [a.model_dump(mode="json") for a in rolled]
    workout.last_completed_date = None
    workout.last_reset_date = to_utc_naive(now)
    workout.updated_at = datetime.utcnow()
    return True


class RolloverEvaluator:
    """Évalue et persiste la bascule des workouts d'un utilisateur."""

    def evaluate(self, session: Session, workouts: List[Workout], now: datetime) -> List[Workout]:
        """
        Retourne les workouts tels qu'ils doivent apparaître aujourd'hui.

        Les workouts basculés sont persistés en un seul commit ; si aucun ne
        l'est, aucune écriture n'a lieu et la lecture d'origine est retournée.
        """
        changed = [w for w in workouts if rollover_workout(w, now)]
        if not changed:
            return workouts

        for workout in changed:
            session.add(workout)
        session.commit()
        for workout in changed:
            session.refresh(workout)

        logger.info(f"Rollover appliqué à {len(changed)} workout(s)")
        return workouts


rollover_evaluator = RolloverEvaluator()

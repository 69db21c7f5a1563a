"""
Service de Complétion Quotidienne - Domain Layer
Score 0-100 résumant la réalisation des workouts terminés dans la journée.
"""
import logging
import math
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlmodel import Session, select

from app.core.clock import day_bounds, local_date
from app.domain.entities.user import User
from app.domain.entities.workout import Workout, WorkoutActivity, SetStatus
from app.domain.errors import UserNotFoundError

logger = logging.getLogger(__name__)

SET_STATUS_SCORES = {
    SetStatus.COMPLETED: 100,
    SetStatus.PARTIAL: 50,
}


def activity_score(activity: WorkoutActivity) -> Optional[float]:
    """Moyenne des scores de séries d'une activité (None si l'activité n'a pas de série)."""
    if not activity.sets:
        return None
    scores = [SET_STATUS_SCORES.get(s.status, 0) for s in activity.sets]
    return sum(scores) / len(scores)


def compute_day_score(activities: Iterable[WorkoutActivity]) -> Optional[int]:
    """
    Moyenne non pondérée des scores d'activités, arrondie à l'entier le plus proche.

    Retourne None si aucune activité ne contient de série.
    """
    activity_scores = [
        score for score in (activity_score(a) for a in activities)
        if score is not None
    ]
    if not activity_scores:
        return None
    mean = sum(activity_scores) / len(activity_scores)
    # Arrondi au demi supérieur (62.5 -> 63)
    return int(math.floor(mean + 0.5))


class DailyCompletionAggregator:
    """Calcule et persiste le score du jour dans User.daily_completions."""

    def completed_workouts_for_day(self, session: Session, user_id: str, now: datetime) -> List[Workout]:
        start, end = day_bounds(local_date(now))
        return session.exec(
            select(Workout).where(
                Workout.user_id == UUID(str(user_id)),
                Workout.last_completed_date >= start,
                Workout.last_completed_date < end,
            )
        ).all()

    def record_day(self, session: Session, user_id: str, now: datetime) -> Optional[int]:
        """Retourne le score enregistré, ou None si rien n'a été enregistré."""
        workouts = self.completed_workouts_for_day(session, user_id, now)
        activities = [a for w in workouts for a in w.parsed_activities()]
        score = compute_day_score(activities)
        if score is None:
            logger.debug(f"Aucune série terminée aujourd'hui pour {user_id}, pas de score")
            return None

        user = session.get(User, UUID(str(user_id)))
        if not user:
            raise UserNotFoundError(f"Utilisateur {user_id} introuvable")

        day_key = local_date(now).isoformat()
        # Nouveau dict pour que SQLAlchemy détecte la modification de la colonne JSON
        user.daily_completions = {**(user.daily_completions or {}), day_key: score}
        user.updated_at = datetime.utcnow()
        session.add(user)
        session.commit()
        return score


daily_completion_aggregator = DailyCompletionAggregator()

"""
Service des objectifs : statut et lock-in des objectifs hebdomadaire et à 3 mois.
"""
import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session

from app.core.clock import to_utc_naive
from app.domain.entities.user import User, GoalProgressUpdate, GoalStatus
from app.domain.errors import UserNotFoundError
from app.domain.services.progress_service import progress_service

logger = logging.getLogger(__name__)

GOAL_PREFIXES = ("weekly_goal", "three_month_goal")


def apply_goal_updates(user: User, updates: dict) -> bool:
    """
    Applique les champs d'objectif envoyés à l'utilisateur.

    Retourne True si un compteur lu par l'évaluateur de badges a changé.
    """
    counters_changed = False
    for prefix in GOAL_PREFIXES:
        if prefix in updates and updates[prefix] is not None:
            setattr(user, prefix, updates[prefix])

        status_field = f"{prefix}_status"
        new_status = updates.get(status_field)
        if new_status is not None:
            previous_status = getattr(user, status_field)
            # Compté une seule fois par passage à 'completed'
            if new_status == GoalStatus.COMPLETED and previous_status != GoalStatus.COMPLETED:
                completions_field = f"{prefix}_completions"
                setattr(user, completions_field, (getattr(user, completions_field) or 0) + 1)
                counters_changed = True
            setattr(user, status_field, GoalStatus(new_status).value)

        lock_in_field = f"{prefix}_lock_in"
        if lock_in_field in updates:
            lock_in = updates[lock_in_field]
            if lock_in is None:
                setattr(user, lock_in_field, None)
            elif getattr(user, lock_in_field) is None:
                # Compté une seule fois tant que le lock-in reste actif
                setattr(user, lock_in_field, to_utc_naive(lock_in))
                count_field = f"{prefix}_lock_in_count"
                setattr(user, count_field, (getattr(user, count_field) or 0) + 1)
                counters_changed = True
    return counters_changed


class GoalService:

    def update_goals(self, session: Session, user_id: str, goal_updates: GoalProgressUpdate) -> User:
        """Met à jour les objectifs puis réévalue les badges."""
        with progress_service.lock_manager.hold(user_id):
            user = session.get(User, UUID(str(user_id)))
            if not user:
                raise UserNotFoundError(f"Utilisateur {user_id} introuvable")

            counters_changed = apply_goal_updates(user, goal_updates.model_dump(exclude_unset=True))
            user.updated_at = datetime.utcnow()
            session.add(user)
            session.commit()

            if counters_changed:
                logger.info(f"Compteurs d'objectifs mis à jour pour {user_id}")
            progress_service.evaluate_badges(session, user_id)

            session.refresh(user)
            return user


goal_service = GoalService()

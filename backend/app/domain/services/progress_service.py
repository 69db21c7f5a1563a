"""
Service de Progression - Domain Layer
Point d'entrée unique pour un événement "done for today".

Enchaîne, sous un verrou exclusif par utilisateur :
    streak -> complétion quotidienne -> badges
Chaque étape est une lecture-modification-écriture commitée séparément et
rejouée sur erreur transitoire. Un échec de la complétion quotidienne ou des
badges est journalisé et remonté à Sentry sans annuler le streak déjà écrit.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.locks import progress_lock_manager
from app.core.logging import report_degradation
from app.core.retry import run_with_retry
from app.domain.entities.user import User, UserProgressRead
from app.domain.errors import TransientPersistenceError, UserNotFoundError
from app.domain.services.badge_service import badge_service
from app.domain.services.daily_completion_service import daily_completion_aggregator
from app.domain.services.streak_service import StreakState, streak_tracker

logger = logging.getLogger(__name__)


@dataclass
class ProgressOutcome:
    """Résultat d'un événement de progression."""
    streak: StreakState
    day_score: Optional[int] = None
    daily_completion_failed: bool = False
    badges_failed: bool = False
    new_badges: Optional[List[str]] = None


class ProgressService:

    def __init__(self, lock_manager=None):
        self.lock_manager = lock_manager or progress_lock_manager

    def record_completion(self, session: Session, user_id: str, now: datetime) -> ProgressOutcome:
        """Applique un événement de progression en exclusivité pour l'utilisateur."""
        with self.lock_manager.hold(user_id):
            return self.run_completion_steps(session, user_id, now)

    def run_completion_steps(self, session: Session, user_id: str, now: datetime) -> ProgressOutcome:
        """
        Exécute streak -> complétion quotidienne -> badges.

        L'appelant doit détenir le verrou de l'utilisateur.
        """
        try:
            streak_state = run_with_retry(
                session, lambda: streak_tracker.record_active_day(session, user_id, now)
            )
        except SQLAlchemyError as e:
            logger.error(f"Mise à jour du streak impossible pour {user_id}: {e}")
            raise TransientPersistenceError("Mise à jour du streak impossible, réessayez") from e

        outcome = ProgressOutcome(streak=streak_state)

        try:
            outcome.day_score = run_with_retry(
                session, lambda: daily_completion_aggregator.record_day(session, user_id, now)
            )
        except SQLAlchemyError as e:
            # Dégrade l'historique des scores, pas la progression
            outcome.daily_completion_failed = True
            logger.error(f"Complétion quotidienne non enregistrée pour {user_id}: {e}")
            report_degradation(e)

        outcome.new_badges, outcome.badges_failed = self.evaluate_badges(session, user_id)
        return outcome

    def evaluate_badges(self, session: Session, user_id: str):
        """
        Réévalue les badges sans faire échouer l'appelant.

        Retourne (badges nouvellement obtenus, échec). En cas d'échec, les
        badges seront rattrapés à la prochaine évaluation.
        """
        try:
            user = session.get(User, UUID(str(user_id)))
            held_before = list(user.badges or []) if user else []
            updated = run_with_retry(session, lambda: badge_service.evaluate(session, user_id))
        except SQLAlchemyError as e:
            logger.error(f"Évaluation des badges échouée pour {user_id}: {e}")
            report_degradation(e)
            return [], True
        return [b for b in updated.badges if b not in held_before], False

    def get_profile(self, session: Session, user_id: str) -> UserProgressRead:
        user = session.get(User, UUID(str(user_id)))
        if not user:
            raise UserNotFoundError(f"Utilisateur {user_id} introuvable")
        return UserProgressRead.model_validate(user)


progress_service = ProgressService()

"""
Service de Streak - Domain Layer
Compteur de jours consécutifs et cycle d'engagement (20 jours par défaut).

Le succès d'un cycle exige un streak *consécutif* atteignant l'objectif au
moment où le cycle se termine : un utilisateur actif sur `streak_goal` jours
calendaires mais dont le streak a été remis à 1 en cours de cycle échoue.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional, Tuple
from uuid import UUID

from sqlmodel import Session

from app.core.clock import local_date, to_utc_naive
from app.domain.entities.user import User
from app.domain.errors import UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakState:
    """Instantané des champs de streak d'un utilisateur (sans accès base)."""

    current_streak: int = 0
    last_active_date: Optional[date] = None
    streak_dates: Tuple[str, ...] = field(default_factory=tuple)
    commitment_start_date: Optional[datetime] = None
    streak_goal: int = 20
    streak_completions: int = 0
    cycle_completed: bool = False
    cycle_succeeded: bool = False

    @classmethod
    def from_user(cls, user: User) -> "StreakState":
        return cls(
            current_streak=user.current_streak or 0,
            last_active_date=user.last_active_date,
            streak_dates=tuple(user.streak_dates or ()),
            commitment_start_date=user.commitment_start_date,
            streak_goal=user.streak_goal,
            streak_completions=user.streak_completions or 0,
        )

    def apply_to(self, user: User) -> None:
        user.current_streak = self.current_streak
        user.last_active_date = self.last_active_date
        user.streak_dates = list(self.streak_dates)
        user.commitment_start_date = self.commitment_start_date
        user.streak_completions = self.streak_completions


def advance_streak(state: StreakState, now: datetime, tz_name: Optional[str] = None) -> StreakState:
    """
    Enregistre une journée active à `now` et clôture le cycle si nécessaire.

    Idempotent pour un même jour calendaire : un second appel le même jour ne
    modifie ni le streak ni `streak_dates`.
    """
    today = local_date(now, tz_name)
    current_streak = state.current_streak
    last_active_date = state.last_active_date

    if last_active_date is None:
        current_streak = 1
        last_active_date = today
    else:
        diff_days = (today - last_active_date).days
        if diff_days == 1:
            current_streak += 1
            last_active_date = today
        elif diff_days > 1:
            # Trou d'au moins un jour : le streak repart à 1
            current_streak = 1
            last_active_date = today
        # diff_days <= 0 : déjà compté aujourd'hui

    streak_dates = state.streak_dates
    if today.isoformat() not in streak_dates:
        streak_dates = streak_dates + (today.isoformat(),)

    new_state = replace(
        state,
        current_streak=current_streak,
        last_active_date=last_active_date,
        streak_dates=streak_dates,
        cycle_completed=False,
        cycle_succeeded=False,
    )

    start = state.commitment_start_date or now
    days_since_start = (today - local_date(start, tz_name)).days + 1
    if days_since_start < state.streak_goal:
        return new_state

    succeeded = current_streak >= state.streak_goal
    return replace(
        new_state,
        current_streak=0,
        last_active_date=None,
        streak_dates=(),
        commitment_start_date=to_utc_naive(now),
        streak_completions=state.streak_completions + (1 if succeeded else 0),
        cycle_completed=True,
        cycle_succeeded=succeeded,
    )


class StreakTracker:
    """Applique une journée active au streak persistant d'un utilisateur."""

    def record_active_day(self, session: Session, user_id: str, now: datetime) -> StreakState:
        """Lit, met à jour et persiste l'état de streak. Retourne le nouvel état."""
        user = session.get(User, UUID(str(user_id)))
        if not user:
            raise UserNotFoundError(f"Utilisateur {user_id} introuvable")

        new_state = advance_streak(StreakState.from_user(user), now)
        new_state.apply_to(user)
        user.updated_at = datetime.utcnow()
        session.add(user)
        session.commit()

        if new_state.cycle_completed:
            logger.info(
                f"Cycle d'engagement terminé pour {user_id} "
                f"({'réussi' if new_state.cycle_succeeded else 'échoué'}, "
                f"{new_state.streak_completions} cycle(s) réussi(s))"
            )
        return new_state


streak_tracker = StreakTracker()

"""
Service des Badges - Domain Layer
Catalogue des badges et évaluation des badges nouvellement obtenus.

L'évaluateur est la seule autorité sur User.badges : il doit être rappelé
après toute mutation d'un compteur qu'il lit. Un badge n'est jamais retiré.
"""
import logging
from typing import Dict, List
from uuid import UUID

from sqlmodel import Session, select

from app.domain.entities.badge import Badge, BadgeCriteriaType
from app.domain.entities.user import User
from app.domain.errors import UserNotFoundError

logger = logging.getLogger(__name__)


DEFAULT_BADGE_CATALOG: List[Dict] = [
    # Objectif hebdomadaire
    {"name": "Weekly Bronze", "description": "Achieve Weekly Goal Twice", "icon": "EmojiEvents",
     "criteria_type": "weekly_goal", "criteria_value": 2, "tier": "bronze"},
    {"name": "Weekly Silver", "description": "Achieve Weekly Goal 6 Times", "icon": "EmojiEvents",
     "criteria_type": "weekly_goal", "criteria_value": 6, "tier": "silver"},
    {"name": "Weekly Gold", "description": "Achieve Weekly Goal 10 Times", "icon": "EmojiEvents",
     "criteria_type": "weekly_goal", "criteria_value": 10, "tier": "gold"},
    # Objectif à 3 mois
    {"name": "3-Month Bronze", "description": "Achieve 3-Month Goal Once", "icon": "EmojiEvents",
     "criteria_type": "three_month_goal", "criteria_value": 1, "tier": "bronze"},
    {"name": "3-Month Silver", "description": "Achieve 3-Month Goal Twice", "icon": "EmojiEvents",
     "criteria_type": "three_month_goal", "criteria_value": 2, "tier": "silver"},
    {"name": "3-Month Gold", "description": "Achieve 3-Month Goal 3 Times", "icon": "EmojiEvents",
     "criteria_type": "three_month_goal", "criteria_value": 3, "tier": "gold"},
    # Cycles d'engagement (20 jours)
    {"name": "Streak Bronze", "description": "Complete 20-day challenge once", "icon": "SelfImprovement",
     "criteria_type": "streak", "criteria_value": 1, "tier": "bronze"},
    {"name": "Streak Silver", "description": "Complete 20-day challenge twice", "icon": "SelfImprovement",
     "criteria_type": "streak", "criteria_value": 2, "tier": "silver"},
    {"name": "Streak Gold", "description": "Complete 20-day challenge 3 times", "icon": "SelfImprovement",
     "criteria_type": "streak", "criteria_value": 3, "tier": "gold"},
]


def counter_for(user: User, criteria_type: str) -> int:
    """Valeur du compteur utilisateur lu par un type de critère."""
    if criteria_type == BadgeCriteriaType.WEEKLY_GOAL:
        return user.weekly_goal_completions or 0
    if criteria_type == BadgeCriteriaType.THREE_MONTH_GOAL:
        return user.three_month_goal_completions or 0
    if criteria_type == BadgeCriteriaType.STREAK:
        return user.streak_completions or 0
    logger.warning(f"Type de critère inconnu ignoré: {criteria_type}")
    return 0


def newly_earned_badges(user: User, catalog: List[Badge]) -> List[str]:
    """Noms des badges du catalogue gagnés et pas encore détenus, dans l'ordre du catalogue."""
    held = set(user.badges or [])
    earned = []
    for badge in catalog:
        if badge.name in held:
            continue
        if counter_for(user, badge.criteria_type) >= badge.criteria_value:
            earned.append(badge.name)
            held.add(badge.name)
    return earned


class BadgeService:

    # ---- Catalogue ----

    def list_catalog(self, session: Session) -> List[Badge]:
        return session.exec(select(Badge).order_by(Badge.position)).all()

    def seed_default_catalog(self, session: Session) -> List[Badge]:
        """Remplace le catalogue par les 9 badges par défaut."""
        for existing in session.exec(select(Badge)).all():
            session.delete(existing)
        session.flush()
        badges = [Badge(position=index, **data) for index, data in enumerate(DEFAULT_BADGE_CATALOG)]
        for badge in badges:
            session.add(badge)
        session.commit()
        logger.info(f"Catalogue de badges initialisé ({len(badges)} badges)")
        return self.list_catalog(session)

    # ---- Évaluation ----

    def evaluate(self, session: Session, user_id: str) -> User:
        """
        Ajoute à l'utilisateur les badges dont le critère est nouvellement satisfait.

        Persiste l'utilisateur une seule fois si au moins un badge a été gagné,
        sinon le retourne sans écriture.
        """
        user = session.get(User, UUID(str(user_id)))
        if not user:
            raise UserNotFoundError(f"Utilisateur {user_id} introuvable")

        earned = newly_earned_badges(user, self.list_catalog(session))
        if not earned:
            return user

        user.badges = [*(user.badges or []), *earned]
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Badges obtenus par {user_id}: {', '.join(earned)}")
        return user


badge_service = BadgeService()

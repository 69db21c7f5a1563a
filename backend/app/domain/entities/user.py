"""
Entité User - Domain Layer
Représente un utilisateur et son état de progression (streak, cycle, objectifs, badges)
"""
from sqlmodel import SQLModel, Field, Relationship, JSON, Column
from sqlalchemy import DateTime, String
from pydantic import field_validator
from typing import Optional, List, Dict, TYPE_CHECKING
from datetime import datetime, date
from uuid import UUID, uuid4
from enum import Enum

from app.core.settings import get_settings

if TYPE_CHECKING:
    from .workout import Workout


class GoalStatus(str, Enum):
    """Statut d'un objectif (hebdomadaire ou trimestriel)"""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def _default_streak_goal() -> int:
    return get_settings().STREAK_GOAL_DEFAULT


class UserBase(SQLModel):
    """Modèle de base pour User"""
    username: str = Field(unique=True, index=True, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        import re
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v):
            raise ValueError('Invalid email format')
        return v.lower()


class User(UserBase, table=True):
    """Entité User complète pour la base de données"""
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)

    # Streak et cycle d'engagement
    current_streak: int = Field(default=0, ge=0)
    last_active_date: Optional[date] = None
    streak_dates: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON),
        description="Dates ISO actives du cycle en cours (sans doublon)"
    )
    commitment_start_date: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    streak_goal: int = Field(default_factory=_default_streak_goal)
    streak_completions: int = Field(default=0)

    # Score quotidien (date ISO -> pourcentage 0-100)
    daily_completions: Dict[str, int] = Field(
        default_factory=dict,
        sa_column=Column(JSON)
    )

    # Objectif hebdomadaire
    weekly_goal: str = Field(default="")
    weekly_goal_status: GoalStatus = Field(
        default=GoalStatus.NOT_STARTED,
        sa_column=Column("weekly_goal_status", String, nullable=False)
    )
    weekly_goal_completions: int = Field(default=0)
    weekly_goal_lock_in: Optional[datetime] = Field(default=None, sa_type=DateTime)
    weekly_goal_lock_in_count: int = Field(default=0)

    # Objectif à 3 mois
    three_month_goal: str = Field(default="")
    three_month_goal_status: GoalStatus = Field(
        default=GoalStatus.NOT_STARTED,
        sa_column=Column("three_month_goal_status", String, nullable=False)
    )
    three_month_goal_completions: int = Field(default=0)
    three_month_goal_lock_in: Optional[datetime] = Field(default=None, sa_type=DateTime)
    three_month_goal_lock_in_count: int = Field(default=0)

    # Badges obtenus, dans l'ordre d'obtention (jamais retirés)
    badges: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON)
    )

    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    # Relations
    workouts: List["Workout"] = Relationship(back_populates="user")


class UserProgressRead(UserBase):
    """Schéma pour lire le profil de progression (réponse API)"""
    id: UUID
    current_streak: int
    last_active_date: Optional[date]
    streak_dates: List[str]
    commitment_start_date: datetime
    streak_goal: int
    streak_completions: int
    daily_completions: Dict[str, int]
    weekly_goal: str
    weekly_goal_status: GoalStatus
    weekly_goal_completions: int
    weekly_goal_lock_in: Optional[datetime]
    weekly_goal_lock_in_count: int
    three_month_goal: str
    three_month_goal_status: GoalStatus
    three_month_goal_completions: int
    three_month_goal_lock_in: Optional[datetime]
    three_month_goal_lock_in_count: int
    badges: List[str]


class GoalProgressUpdate(SQLModel):
    """Schéma pour mettre à jour les objectifs (seuls les champs envoyés sont appliqués)"""
    weekly_goal: Optional[str] = None
    weekly_goal_status: Optional[GoalStatus] = None
    weekly_goal_lock_in: Optional[datetime] = None
    three_month_goal: Optional[str] = None
    three_month_goal_status: Optional[GoalStatus] = None
    three_month_goal_lock_in: Optional[datetime] = None

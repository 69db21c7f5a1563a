"""
Entité Badge - Domain Layer
Catalogue des badges et de leurs critères d'obtention
"""
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String
from typing import Optional
from uuid import UUID, uuid4
from enum import Enum


class BadgeCriteriaType(str, Enum):
    """Compteur utilisateur évalué par le badge"""
    STREAK = "streak"
    WEEKLY_GOAL = "weekly_goal"
    THREE_MONTH_GOAL = "three_month_goal"


class BadgeTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class BadgeBase(SQLModel):
    """Modèle de base pour Badge"""
    name: str = Field(unique=True, index=True)
    description: str
    icon: str
    criteria_type: BadgeCriteriaType
    criteria_value: int
    tier: BadgeTier = BadgeTier.BRONZE


class Badge(BadgeBase, table=True):
    """Entrée du catalogue de badges"""
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)

    # Colonnes TEXT pour éviter les problèmes d'enum SQLAlchemy
    criteria_type: BadgeCriteriaType = Field(sa_column=Column("criteria_type", String, nullable=False))
    tier: BadgeTier = Field(
        default=BadgeTier.BRONZE,
        sa_column=Column("tier", String, nullable=False)
    )

    # Ordre du catalogue (départage les badges gagnés dans une même passe)
    position: int = Field(default=0, index=True)


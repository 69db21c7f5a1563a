"""
Entité Workout - Domain Layer
Représente une routine d'entraînement d'un utilisateur (activités et séries)
"""
import math
from sqlmodel import SQLModel, Field, Relationship, JSON, Column
from sqlalchemy import DateTime
from pydantic import field_validator
from typing import Optional, List, Dict, Any, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4
from enum import Enum

if TYPE_CHECKING:
    from .user import User


class SetParameter(str, Enum):
    """Dimensions mesurables d'une série"""
    WEIGHT = "Weight"
    TIME = "Time"
    DISTANCE = "Distance"
    REPS = "Reps"
    SETS = "Sets"
    REST = "Rest"
    INCLINE = "Incline"
    SPEED = "Speed"
    RESISTANCE = "Resistance"
    CADENCE = "Cadence"
    HEIGHT = "Height"


class SetStatus(str, Enum):
    """Statut de réalisation d'une série"""
    NONE = "none"
    COMPLETED = "completed"
    PARTIAL = "partial"
    INCOMPLETE = "incomplete"


def normalize_suggestion(value: Any) -> Optional[float]:
    """
    Convertit une valeur suggérée brute en nombre exploitable.

    Une valeur absente, non numérique, nulle ou infinie signifie
    "pas de suggestion" et retourne None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number == 0 or not math.isfinite(number):
        return None
    return number


class WorkoutSet(SQLModel):
    """Série d'une activité (stockée en JSON dans Workout.activities)"""
    parameter: SetParameter
    value: float
    unit: str
    status: SetStatus = SetStatus.NONE
    next_suggested_value: Optional[float] = None
    previous_value: Optional[float] = None
    suggestion_applied: bool = False

    @field_validator("next_suggested_value", mode="before")
    @classmethod
    def validate_next_suggested_value(cls, v: Any) -> Optional[float]:
        return normalize_suggestion(v)


class WorkoutActivity(SQLModel):
    """Activité d'un workout : un exercice et ses séries ordonnées"""
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    sets: List[WorkoutSet] = Field(default_factory=list)


class WorkoutBase(SQLModel):
    """Modèle de base pour Workout"""
    day: str  # Libellé du jour (Monday, Tuesday, ...)
    title: str


class Workout(WorkoutBase, table=True):
    """Entité Workout complète pour la base de données"""
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)

    # Activités et séries sérialisées (voir WorkoutActivity)
    activities: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON),
        description="Activités ordonnées avec leurs séries"
    )

    # Non nul = "done for today" pressé et pas encore basculé au jour suivant
    last_completed_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    last_reset_date: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Métadonnées
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    # Relations
    user: "User" = Relationship(back_populates="workouts")

    def parsed_activities(self) -> List[WorkoutActivity]:
        """Retourne les activités validées sous forme de modèles."""
        return [WorkoutActivity.model_validate(a) for a in (self.activities or [])]


class WorkoutCreate(WorkoutBase):
    """Schéma pour créer un workout"""
    activities: List[WorkoutActivity] = Field(default_factory=list)


class WorkoutUpdate(WorkoutBase):
    """Schéma pour mettre à jour un workout (remplacement complet)"""
    activities: List[WorkoutActivity] = Field(default_factory=list)
    last_completed_date: Optional[datetime] = None


"""
Entité WorkoutLog - Domain Layer
Historique des valeurs réalisées, une ligne par série enregistrée lors d'un "done for today".
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime


class WorkoutLog(SQLModel, table=True):
    """Valeur réalisée pour une série à une date donnée."""
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    # Sans clé étrangère : l'historique survit à la suppression du workout
    workout_id: Optional[UUID] = Field(default=None, index=True)
    date: datetime = Field(index=True, sa_type=DateTime)

    workout_title: str
    activity_name: str
    parameter: str
    value: float
    unit: str

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)


"""
Initialisation des entités du domaine
Résout les imports circulaires entre les modèles
"""

# Import des modèles dans l'ordre correct pour éviter les imports circulaires
from .user import User, UserProgressRead, GoalProgressUpdate, GoalStatus
from .workout import (
    Workout, WorkoutCreate, WorkoutUpdate,
    WorkoutActivity, WorkoutSet, SetParameter, SetStatus,
)
from .badge import Badge, BadgeCriteriaType, BadgeTier
from .workout_log import WorkoutLog

__all__ = [
    "User", "UserProgressRead", "GoalProgressUpdate", "GoalStatus",
    "Workout", "WorkoutCreate", "WorkoutUpdate",
    "WorkoutActivity", "WorkoutSet", "SetParameter", "SetStatus",
    "Badge", "BadgeCriteriaType", "BadgeTier",
    "WorkoutLog",
]

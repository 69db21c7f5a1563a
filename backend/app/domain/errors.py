"""
Erreurs du moteur de progression.

Chaque erreur porte un code stable et indique si l'appelant peut réessayer,
pour distinguer "introuvable" d'une défaillance transitoire.
"""


class ProgressError(RuntimeError):
    """Erreur de base du moteur de progression."""

    code = "progress_error"
    retryable = False

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


class WorkoutNotFoundError(ProgressError):
    """Workout inexistant ou appartenant à un autre utilisateur."""
    code = "workout_not_found"


class UserNotFoundError(ProgressError):
    code = "user_not_found"


class SetNotFoundError(ProgressError):
    code = "set_not_found"


class NoSuggestionError(ProgressError):
    """La série ne porte aucune suggestion appliquée à accepter ou rejeter."""
    code = "no_suggestion"


class TransientPersistenceError(ProgressError):
    """Datastore injoignable ou conflit d'écriture ; l'appel peut être rejoué."""
    code = "transient_failure"
    retryable = True


class ProgressBusyError(ProgressError):
    """Verrou utilisateur non obtenu dans le délai imparti."""
    code = "progress_busy"
    retryable = True

"""
Configuration centralisée pour le moteur de progression Healthify
Utilise pydantic-settings pour la gestion des variables d'environnement
"""
from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from functools import lru_cache
import math

# streak, complétion quotidienne, badges
PROGRESS_RETRIED_STEPS = 3
# lecture utilisateur, requête annexe (workouts, catalogue, historique), commit
STATEMENTS_PER_ATTEMPT = 3


class Settings(BaseSettings):
    """Configuration de l'application"""

    # Database
    DATABASE_URL: str = Field(
        description="URL de la base de données (PostgreSQL en production)"
    )
    DB_STATEMENT_TIMEOUT_MS: int = Field(
        default=5000,
        description="Durée maximale d'une requête SQL avant abandon (millisecondes)"
    )

    # Redis (verrous par utilisateur)
    REDIS_URL: str = Field(
        default="redis://localhost:6379",
        description="URL de connexion Redis (verrous de progression partagés entre workers)"
    )
    USE_REDIS_LOCKS: bool = Field(
        default=True,
        description="Utiliser Redis pour les verrous par utilisateur (sinon verrou local au processus)"
    )
    PROGRESS_LOCK_TIMEOUT_SECONDS: int = Field(
        default=10,
        description="Durée de vie d'un verrou de progression, relevée au budget de la séquence si nécessaire"
    )
    PROGRESS_LOCK_WAIT_SECONDS: float = Field(
        default=5.0,
        description="Attente maximale pour obtenir le verrou avant de répondre 'occupé'"
    )

    # Moteur de progression
    APP_TIMEZONE: str = Field(
        default="UTC",
        description="Fuseau horaire servant à déterminer le jour calendaire (rollover, streak)"
    )
    STREAK_GOAL_DEFAULT: int = Field(
        default=20,
        description="Longueur par défaut d'un cycle d'engagement (jours)"
    )
    PERSISTENCE_RETRY_ATTEMPTS: int = Field(
        default=3,
        description="Nombre de tentatives pour chaque écriture post-complétion"
    )
    PERSISTENCE_RETRY_MAX_WAIT_SECONDS: float = Field(
        default=2.0,
        description="Attente maximale entre deux tentatives (back-off exponentiel plafonné)"
    )
    HISTORY_DEFAULT_DAYS: int = Field(default=14)

    # Monitoring (Sentry)
    SENTRY_DSN: str = Field(
        default="",
        description="DSN Sentry pour le error tracking (vide = Sentry desactive)"
    )

    # Application
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(
        default="",
        description="Niveau de logging (auto-configuré selon ENVIRONMENT si vide)"
    )

    @model_validator(mode="after")
    def _configure_environment(self) -> "Settings":
        """Configure DEBUG et LOG_LEVEL selon ENVIRONMENT."""
        is_prod = self.ENVIRONMENT == "production"
        # En production, forcer DEBUG=False
        if is_prod:
            self.DEBUG = False
        # LOG_LEVEL par défaut selon ENVIRONMENT
        if not self.LOG_LEVEL:
            self.LOG_LEVEL = "WARNING" if is_prod else "INFO"
        return self

    @model_validator(mode="after")
    def _cover_progress_budget(self) -> "Settings":
        """Le verrou de progression ne doit pas expirer avant la fin de la séquence."""
        budget = math.ceil(self.progress_budget_seconds())
        if self.PROGRESS_LOCK_TIMEOUT_SECONDS < budget:
            self.PROGRESS_LOCK_TIMEOUT_SECONDS = budget
        return self

    def progress_budget_seconds(self) -> float:
        """
        Durée maximale d'un "done for today" sous verrou.

        Écriture du workout et de son historique (une tentative) puis streak,
        complétion quotidienne et badges, chacun avec PERSISTENCE_RETRY_ATTEMPTS
        tentatives. Chaque requête est bornée par DB_STATEMENT_TIMEOUT_MS.
        """
        attempt_seconds = STATEMENTS_PER_ATTEMPT * self.DB_STATEMENT_TIMEOUT_MS / 1000
        attempts = max(self.PERSISTENCE_RETRY_ATTEMPTS, 1)
        per_step = attempts * attempt_seconds + (attempts - 1) * self.PERSISTENCE_RETRY_MAX_WAIT_SECONDS
        return attempt_seconds + PROGRESS_RETRIED_STEPS * per_step

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Récupère la configuration"""
    return Settings()

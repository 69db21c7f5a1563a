"""
Point d'entrée du moteur de progression Healthify
Initialise le logging, Sentry et la base de données
"""
import logging

from app.core.settings import get_settings
from app.core.logging import configure_logging
from app.core.database import create_db_and_tables

settings = get_settings()

logger = logging.getLogger(__name__)


def startup() -> None:
    """Prépare le processus : logging, error tracking et tables."""
    configure_logging(settings)
    logger.info("🚀 Démarrage du moteur de progression Healthify")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    create_db_and_tables()
    logger.info("✅ Base de données initialisée")

    if not settings.USE_REDIS_LOCKS:
        logger.warning("⚠️  Verrous Redis désactivés, verrous locaux au processus uniquement")


if __name__ == "__main__":
    startup()

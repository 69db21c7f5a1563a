"""
Configuration du logging et du error tracking (Sentry)
"""
import logging
from logging.handlers import RotatingFileHandler
import sys

import sentry_sdk

from app.core.settings import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Installe les handlers de logging selon ENVIRONMENT et initialise Sentry."""
    settings = settings or get_settings()

    # Initialiser Sentry (uniquement si SENTRY_DSN est configure)
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
            send_default_pii=False,
        )

    _log_level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

    _handler = logging.StreamHandler(sys.stdout)

    if settings.ENVIRONMENT == "production":
        from pythonjsonlogger import jsonlogger
        _handler.setFormatter(jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        ))
    else:
        _handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    _handlers: list[logging.Handler] = [_handler]
    if settings.ENVIRONMENT != "production":
        _handlers.append(RotatingFileHandler(
            'healthify.log', maxBytes=5_000_000, backupCount=3,
        ))

    logging.basicConfig(
        level=_log_level,
        handlers=_handlers,
    )

    # En production, réduire le bruit des modules tiers
    if settings.ENVIRONMENT == "production":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def report_degradation(exc: BaseException) -> None:
    """Remonte une erreur non fatale à Sentry (no-op si Sentry n'est pas initialisé)."""
    sentry_sdk.capture_exception(exc)

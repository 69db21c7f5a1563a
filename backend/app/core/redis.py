"""
Client Redis pour Healthify.
Fournit une connexion partagée pour les verrous de progression.
"""
import logging
from functools import lru_cache

import redis

from app.core.settings import get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_redis_client() -> redis.Redis:
    """Retourne un client Redis connecté (singleton via lru_cache)."""
    settings = get_settings()
    return redis.Redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )

"""
ProgressLockManager : section critique par utilisateur.

Sérialise les écritures de progression (streak, complétion quotidienne,
badges) d'un même utilisateur. Utilise un verrou Redis
(progress:lock:<user_id>) partagé entre workers ; si Redis est désactivé ou
injoignable, se replie sur un verrou local au processus avec la même
interface.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

import redis

from app.core.redis import get_redis_client
from app.core.settings import get_settings
from app.domain.errors import ProgressBusyError

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "progress:lock:"


class ProgressLockManager:
    """Verrous exclusifs indexés par identifiant utilisateur."""

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        use_redis: Optional[bool] = None,
        lock_timeout: Optional[int] = None,
        wait_timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self._redis: Optional[redis.Redis] = redis_client
        self.use_redis = settings.USE_REDIS_LOCKS if use_redis is None else use_redis
        self.lock_timeout = lock_timeout or settings.PROGRESS_LOCK_TIMEOUT_SECONDS
        self.wait_timeout = settings.PROGRESS_LOCK_WAIT_SECONDS if wait_timeout is None else wait_timeout
        self._local_locks: Dict[str, threading.Lock] = {}
        # Détenteurs et candidats par utilisateur ; le verrou est retiré à 0
        self._local_users: Dict[str, int] = {}
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_redis(self) -> redis.Redis:
        """Retourne le client Redis (lazy init)."""
        if self._redis is None:
            self._redis = get_redis_client()
        return self._redis

    def _checkout_local(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._local_locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._local_locks[user_id] = lock
            self._local_users[user_id] = self._local_users.get(user_id, 0) + 1
            return lock

    def _checkin_local(self, user_id: str) -> None:
        with self._registry_lock:
            remaining = self._local_users[user_id] - 1
            if remaining:
                self._local_users[user_id] = remaining
            else:
                del self._local_users[user_id]
                del self._local_locks[user_id]

    @contextmanager
    def _hold_local(self, user_id: str) -> Iterator[None]:
        lock = self._checkout_local(user_id)
        try:
            if not lock.acquire(timeout=self.wait_timeout):
                raise ProgressBusyError(f"Progression de {user_id} déjà en cours")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin_local(user_id)

    # ------------------------------------------------------------------
    # Interface publique
    # ------------------------------------------------------------------

    @contextmanager
    def hold(self, user_id) -> Iterator[None]:
        """Exécute le bloc en exclusivité pour `user_id`."""
        user_key = str(user_id)
        if not self.use_redis:
            with self._hold_local(user_key):
                yield
            return

        try:
            lock = self._get_redis().lock(
                f"{LOCK_KEY_PREFIX}{user_key}",
                timeout=self.lock_timeout,
                blocking_timeout=self.wait_timeout,
            )
            acquired = lock.acquire()
        except redis.RedisError as exc:
            logger.warning(f"Redis indisponible (verrou {user_key}), repli sur verrou local: {exc}")
            with self._hold_local(user_key):
                yield
            return

        if not acquired:
            raise ProgressBusyError(f"Progression de {user_key} déjà en cours")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.RedisError as exc:
                # Verrou expiré avant la fin du bloc : il sera libéré par son TTL
                logger.warning(f"Libération du verrou {user_key} impossible: {exc}")


progress_lock_manager = ProgressLockManager()

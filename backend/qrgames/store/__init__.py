"""Session storage backends and the config-driven factory."""

import logging

from redis.exceptions import RedisError

from .base import SessionStore
from .memory_store import MemorySessionStore
from .redis_store import RedisSessionStore

logger = logging.getLogger(__name__)

__all__ = ['SessionStore', 'MemorySessionStore', 'RedisSessionStore', 'create_store']


def create_store(config) -> SessionStore:
    """Build the store named by ``STORAGE_TYPE``.

    A redis backend that cannot be reached at startup is replaced by the
    memory backend so the server still comes up.
    """
    storage_type = str(config.get('STORAGE_TYPE', 'memory')).lower()
    lock_timeout = float(config.get('STORE_LOCK_TIMEOUT_SEC', 5))
    if storage_type == 'redis':
        url = config.get('REDIS_URL', 'redis://localhost:6379/0')
        try:
            store = RedisSessionStore.from_url(
                url,
                socket_timeout=float(config.get('REDIS_SOCKET_TIMEOUT_SEC', 2)),
                key_prefix=config.get('REDIS_KEY_PREFIX', 'session:'),
                lock_timeout=lock_timeout,
            )
            store.connect()
            return store
        except (RedisError, ValueError) as exc:
            logger.warning(f"[store-fallback] redis unavailable at {url} ({exc}); using memory storage")
    elif storage_type != 'memory':
        logger.warning(f"[store-fallback] unknown STORAGE_TYPE={storage_type!r}; using memory storage")
    return MemorySessionStore(lock_timeout=lock_timeout)

import json
import logging
from contextlib import contextmanager
from typing import List, Optional

import redis
from redis.exceptions import RedisError

from qrgames.models import Session
from .base import SessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Shared store: one JSON document per session under ``<prefix><id>``.

    Redis errors and undecodable documents are logged and reported as
    absent/failed; nothing here raises to the caller.
    """

    name = 'redis'

    def __init__(self, client, key_prefix: str = 'session:', lock_timeout: float = 5.0):
        self.client = client
        self.key_prefix = key_prefix
        self.lock_timeout = lock_timeout

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0, **kwargs) -> 'RedisSessionStore':
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=True,
        )
        return cls(client, **kwargs)

    def connect(self) -> None:
        """Ping the server; raises RedisError when it cannot be reached."""
        self.client.ping()
        logger.info("[store-connect] backend=redis ok")

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def get(self, session_id: str) -> Optional[Session]:
        try:
            raw = self.client.get(self._key(session_id))
        except RedisError as exc:
            logger.error(f"[store-get] session={session_id} redis error: {exc}")
            return None
        if raw is None:
            return None
        try:
            return Session.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error(f"[store-get] session={session_id} undecodable record: {exc}")
            return None

    def set(self, session_id: str, session: Session) -> bool:
        try:
            self.client.set(self._key(session_id), json.dumps(session.to_dict()))
        except (RedisError, TypeError, ValueError) as exc:
            logger.error(f"[store-set] session={session_id} failed: {exc}")
            return False
        return True

    def delete(self, session_id: str) -> bool:
        try:
            return self.client.delete(self._key(session_id)) > 0
        except RedisError as exc:
            logger.error(f"[store-delete] session={session_id} redis error: {exc}")
            return False

    def has(self, session_id: str) -> bool:
        try:
            return self.client.exists(self._key(session_id)) == 1
        except RedisError as exc:
            logger.error(f"[store-has] session={session_id} redis error: {exc}")
            return False

    def keys(self) -> List[str]:
        try:
            found = self.client.scan_iter(match=f"{self.key_prefix}*")
            return [key[len(self.key_prefix):] for key in found]
        except RedisError as exc:
            logger.error(f"[store-keys] redis error: {exc}")
            return []

    @contextmanager
    def lock(self, session_id: str):
        lock = self.client.lock(
            f"lock:{self._key(session_id)}",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_timeout,
        )
        try:
            acquired = lock.acquire()
        except RedisError as exc:
            logger.error(f"[lock-error] session={session_id} {exc}")
            acquired = False
        if not acquired:
            logger.warning(f"[lock-timeout] session={session_id} backend=redis proceeding unlocked")
        try:
            yield
        finally:
            if acquired:
                try:
                    lock.release()
                except RedisError as exc:
                    # Lock expired under us; the write already happened
                    logger.warning(f"[lock-release] session={session_id} {exc}")

    def close(self) -> None:
        try:
            self.client.close()
        except RedisError as exc:
            logger.warning(f"[store-close] redis error: {exc}")

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional

from qrgames.models import Session
from .base import SessionStore

logger = logging.getLogger(__name__)


class MemorySessionStore(SessionStore):
    """Process-local store. Sessions are kept as private deep copies."""

    name = 'memory'

    def __init__(self, lock_timeout: float = 5.0):
        self._data: Dict[str, Session] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self.lock_timeout = lock_timeout

    def get(self, session_id: str) -> Optional[Session]:
        session = self._data.get(session_id)
        return copy.deepcopy(session) if session is not None else None

    def set(self, session_id: str, session: Session) -> bool:
        self._data[session_id] = copy.deepcopy(session)
        return True

    def delete(self, session_id: str) -> bool:
        with self._locks_guard:
            self._locks.pop(session_id, None)
        return self._data.pop(session_id, None) is not None

    def has(self, session_id: str) -> bool:
        return session_id in self._data

    def keys(self) -> List[str]:
        return list(self._data.keys())

    @contextmanager
    def lock(self, session_id: str):
        with self._locks_guard:
            lock = self._locks.setdefault(session_id, threading.Lock())
        acquired = lock.acquire(timeout=self.lock_timeout)
        if not acquired:
            logger.warning(f"[lock-timeout] session={session_id} backend=memory proceeding unlocked")
        try:
            yield
        finally:
            if acquired:
                lock.release()

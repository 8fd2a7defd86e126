from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable, List, Optional

from qrgames.models import Session


class SessionStore(ABC):
    """Key-value storage for sessions.

    Every backend honours the same contract: values handed to ``set`` are
    copied (or serialized), ``get`` returns an independent object, and
    backend failures surface as "absent"/``False`` instead of raising.
    """

    name = 'abstract'

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        ...

    @abstractmethod
    def set(self, session_id: str, session: Session) -> bool:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def has(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    @abstractmethod
    def lock(self, session_id: str) -> AbstractContextManager:
        """Serialize read-modify-write sequences on one session id."""

    def for_each(self, fn: Callable[[Session, str], None]) -> None:
        for session_id in self.keys():
            session = self.get(session_id)
            if session is not None:
                fn(session, session_id)

    def close(self) -> None:
        pass

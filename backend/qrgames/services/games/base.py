from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any, NamedTuple, Optional

from qrgames.models import GameType, Player, Session


class Scope(StrEnum):
    SESSION = 'session'
    SENDER = 'sender'


class Action(NamedTuple):
    kind: str
    value: Any = None


class ActionResult(NamedTuple):
    event: str
    payload: dict
    scope: Scope = Scope.SESSION


class GameEngine(ABC):
    """State machine for one game type.

    Engines mutate the session they are handed and never touch storage;
    the lobby manager brackets every call between a store get and set.
    """

    game_type: GameType
    authority_actions: frozenset = frozenset()

    @abstractmethod
    def initialize(self, session: Session) -> None:
        ...

    @abstractmethod
    def handle_player_action(self, session: Session, player_id: str, action: Action) -> Optional[ActionResult]:
        """Apply ``action`` and describe what to emit, or return None for a no-op."""

    def is_authority_action(self, kind: str) -> bool:
        return str(kind) in self.authority_actions

    def on_player_joined(self, session: Session, player: Player) -> None:
        pass

    def is_active(self, session: Session) -> bool:
        return session.game_type == self.game_type and session.game_state is not None

import logging
import uuid
from datetime import timedelta
from typing import Dict, List, NamedTuple, Optional

from qrgames.exceptions import InvalidGameType, InvalidPlayer, InvalidSessionId, SessionNotFound
from qrgames.models import GameType, Player, Session, utcnow
from qrgames.store import SessionStore
from qrgames.validation import validate_player, validate_session_id
from .games import Action, ActionResult, GameEngine, default_engines

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 10


class Arrival(NamedTuple):
    session_id: str
    player: Player
    players: List[Player]


class Departure(NamedTuple):
    session_id: str
    player: Player
    players: List[Player]


class LobbyManager:
    """Owns session lifecycle and routes game actions to the active engine.

    Every mutation happens inside ``store.lock(session_id)`` as one
    get -> mutate -> set sequence, so concurrent events against the same
    session are applied one at a time.
    """

    def __init__(self, store: SessionStore, engines: Optional[Dict[str, GameEngine]] = None):
        self.store = store
        self.engines = engines if engines is not None else default_engines()

    # ---- lookup ----

    def engine_for(self, game_type) -> Optional[GameEngine]:
        if game_type is None:
            return None
        return self.engines.get(str(game_type))

    def get_session(self, session_id: str) -> Optional[Session]:
        if not validate_session_id(session_id):
            return None
        return self.store.get(session_id)

    def _load(self, session_id: str) -> Session:
        if not validate_session_id(session_id):
            raise InvalidSessionId()
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFound()
        return session

    def _save(self, session: Session) -> bool:
        ok = self.store.set(session.id, session)
        if not ok:
            logger.warning(f"[save-failed] session={session.id}")
        return ok

    @staticmethod
    def require_host_authority(session: Session, connection_id: str) -> bool:
        return session.host_connection_id is not None and session.host_connection_id == connection_id

    # ---- lifecycle ----

    def _new_session_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            session_id = uuid.uuid4().hex[:8]
            if not self.store.has(session_id):
                return session_id
            logger.info(f"[id-collision] session={session_id} retrying")
        raise RuntimeError('could not allocate a free session id')

    def create_session(self, game_type: Optional[str] = None) -> Session:
        if game_type is not None and self.engine_for(game_type) is None:
            raise InvalidGameType()
        session = Session(
            id=self._new_session_id(),
            game_type=GameType(game_type) if game_type is not None else None,
        )
        self._save(session)
        logger.info(f"[create] session={session.id} game_type={session.game_type}")
        return session

    def attach_host(self, session_id: str, connection_id: str) -> bool:
        if not validate_session_id(session_id):
            raise InvalidSessionId()
        with self.store.lock(session_id):
            session = self.store.get(session_id)
            if session is None:
                return False
            session.host_connection_id = connection_id
            self._save(session)
        logger.info(f"[host-attach] session={session_id} host={connection_id}")
        return True

    def join_session(self, session_id: str, raw_player, connection_id: str) -> Arrival:
        if not validate_session_id(session_id):
            raise InvalidSessionId()
        with self.store.lock(session_id):
            session = self._load(session_id)
            validation = validate_player(raw_player)
            if not validation.valid:
                raise InvalidPlayer(validation.error)

            player = Player(
                id=connection_id,
                name=validation.sanitized['name'],
                avatar=validation.sanitized['avatar'],
            )
            # A connection appears at most once per roster
            session.remove_player(connection_id)
            session.players.append(player)
            engine = self.engine_for(session.game_type)
            if engine is not None:
                engine.on_player_joined(session, player)
            self._save(session)
        logger.info(f"[join] session={session_id} player={connection_id} name={player.name!r}")
        return Arrival(session_id, player, session.players)

    def remove_connection(self, connection_id: str) -> List[Departure]:
        departures = []
        for session_id in self.store.keys():
            with self.store.lock(session_id):
                session = self.store.get(session_id)
                if session is None:
                    continue
                player = session.remove_player(connection_id)
                if player is None:
                    continue
                self._save(session)
            logger.info(f"[leave] session={session_id} player={connection_id}")
            departures.append(Departure(session_id, player, session.players))
        return departures

    def end_session(self, session_id: str) -> bool:
        if not validate_session_id(session_id):
            return False
        with self.store.lock(session_id):
            removed = self.store.delete(session_id)
        if removed:
            logger.info(f"[end] session={session_id}")
        return removed

    def purge_expired_sessions(self, max_age_seconds: int) -> List[str]:
        cutoff = utcnow() - timedelta(seconds=max_age_seconds)
        expired = []

        def _collect(session: Session, session_id: str) -> None:
            if session.created_at <= cutoff:
                expired.append(session_id)

        self.store.for_each(_collect)
        return [sid for sid in expired if self.end_session(sid)]

    # ---- games ----

    def start_game(self, session_id: str, connection_id: str, game_type: Optional[str] = None) -> Optional[Session]:
        if not validate_session_id(session_id):
            raise InvalidSessionId()
        with self.store.lock(session_id):
            session = self._load(session_id)
            if not self.require_host_authority(session, connection_id):
                return None
            chosen = game_type if game_type is not None else session.game_type
            engine = self.engine_for(chosen)
            if engine is None:
                raise InvalidGameType()
            session.game_type = engine.game_type
            engine.initialize(session)
            self._save(session)
        logger.info(f"[start] session={session_id} game_type={session.game_type} players={len(session.players)}")
        return session

    def perform_action(self, session_id: str, connection_id: str, action: Action) -> Optional[ActionResult]:
        if not validate_session_id(session_id):
            raise InvalidSessionId()
        with self.store.lock(session_id):
            session = self._load(session_id)
            engine = self.engine_for(session.game_type)
            if engine is None or session.game_state is None:
                return None
            if engine.is_authority_action(action.kind) and not self.require_host_authority(session, connection_id):
                return None
            result = engine.handle_player_action(session, connection_id, action)
            if result is None:
                return None
            self._save(session)
        return result

from functools import wraps

from flask import current_app, request
from flask_socketio import emit, join_room
from pydantic import ValidationError

from qrgames import socketio
from qrgames.events import (
    ClaimPatternPayload,
    CreateSessionPayload,
    InboundEvent,
    JoinSessionPayload,
    MarkNumberPayload,
    OutboundEvent,
    SessionPayload,
    StartGamePayload,
    SubmitAnswerPayload,
    describe_validation_error,
)
from qrgames.exceptions import LobbyError
from qrgames.qr import join_info
from qrgames.services.games import Action, Scope
from qrgames.services.lobby import LobbyManager


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _notify_sender(message: str) -> None:
    emit(OutboundEvent.ERROR, {'message': message})


def _guarded(event: str, failure_message: str):
    """Turn rejections into a sender-only error notice.

    Unexpected exceptions are logged and answered the same way, so one bad
    event never takes the handler loop down for other connections.
    """
    def decorator(handler):
        @wraps(handler)
        def wrapper(self, data=None, *_extra):
            try:
                return handler(self, data)
            except ValidationError as exc:
                message = describe_validation_error(event, exc)
                current_app.logger.info(f"[rejected] event={event} sid={_get_sid()} reason={message!r}")
                _notify_sender(message)
            except LobbyError as exc:
                current_app.logger.info(f"[rejected] event={event} sid={_get_sid()} reason={exc.message!r}")
                _notify_sender(exc.message)
            except Exception:
                current_app.logger.exception(f"[handler-error] event={event} sid={_get_sid()}")
                _notify_sender(failure_message)
        return wrapper
    return decorator


class EventRouter:
    """Maps inbound Socket.IO events onto the lobby manager and fans results out.

    Each session id doubles as the Socket.IO room (channel) for that session.
    """

    def __init__(self, manager: LobbyManager):
        self.manager = manager

    def _subscribe(self, session_id: str) -> None:
        join_room(session_id)

    def _deliver(self, session_id: str, result) -> None:
        self._subscribe(session_id)
        if result.scope == Scope.SENDER:
            emit(result.event, result.payload)
        else:
            emit(result.event, result.payload, to=session_id)

    def _perform(self, session_id: str, kind: str, value=None) -> None:
        result = self.manager.perform_action(session_id, _get_sid(), Action(kind, value))
        if result is None:
            return
        current_app.logger.info(f"[action] session={session_id} sid={_get_sid()} kind={kind} -> {result.event}")
        self._deliver(session_id, result)

    # ---- lobby ----

    @_guarded(InboundEvent.CREATE_SESSION, 'Failed to create session')
    def on_create_session(self, data):
        payload = CreateSessionPayload.model_validate(data)
        session = self.manager.create_session(payload.game_type)
        self._subscribe(session.id)
        emit(OutboundEvent.SESSION_CREATED, join_info(session.id))

    @_guarded(InboundEvent.HOST_ATTACH, 'Failed to join session as host')
    def on_host_attach(self, data):
        payload = SessionPayload.model_validate(data)
        # Unknown sessions are ignored without a notice
        if self.manager.attach_host(payload.session_id, _get_sid()):
            self._subscribe(payload.session_id)

    @_guarded(InboundEvent.JOIN_SESSION, 'Failed to join session')
    def on_join_session(self, data):
        payload = JoinSessionPayload.model_validate(data)
        arrival = self.manager.join_session(payload.session_id, payload.player, _get_sid())
        self._subscribe(arrival.session_id)
        emit(OutboundEvent.PLAYER_JOINED, {
            'player': arrival.player.to_dict(),
            'players': [p.to_dict() for p in arrival.players],
        }, to=arrival.session_id)

    def on_disconnect(self, reason=None):
        sid = _get_sid()
        try:
            departures = self.manager.remove_connection(sid)
        except Exception:
            current_app.logger.exception(f"[handler-error] event=disconnect sid={sid}")
            return
        for departure in departures:
            emit(OutboundEvent.PLAYER_LEFT, {
                'playerId': sid,
                'playerName': departure.player.name,
                'players': [p.to_dict() for p in departure.players],
            }, to=departure.session_id)

    # ---- games ----

    @_guarded(InboundEvent.START_GAME, 'Failed to start game')
    def on_start_game(self, data):
        payload = StartGamePayload.model_validate(data)
        session = self.manager.start_game(payload.session_id, _get_sid(), payload.game_type)
        if session is None:
            return
        self._subscribe(session.id)
        emit(OutboundEvent.GAME_STARTED, {
            'gameType': session.game_type.value,
            'gameState': session.game_state.to_dict(),
        }, to=session.id)

    @_guarded(InboundEvent.SUBMIT_ANSWER, 'Failed to submit answer')
    def on_submit_answer(self, data):
        payload = SubmitAnswerPayload.model_validate(data)
        self._perform(payload.session_id, InboundEvent.SUBMIT_ANSWER, payload.answer)

    @_guarded(InboundEvent.ADVANCE_QUESTION, 'Failed to load next question')
    def on_advance_question(self, data):
        payload = SessionPayload.model_validate(data)
        self._perform(payload.session_id, InboundEvent.ADVANCE_QUESTION)

    @_guarded(InboundEvent.MARK_NUMBER, 'Failed to mark number')
    def on_mark_number(self, data):
        payload = MarkNumberPayload.model_validate(data)
        self._perform(payload.session_id, InboundEvent.MARK_NUMBER, payload.number)

    @_guarded(InboundEvent.CALL_NUMBER, 'Failed to call number')
    def on_call_number(self, data):
        payload = SessionPayload.model_validate(data)
        self._perform(payload.session_id, InboundEvent.CALL_NUMBER)

    @_guarded(InboundEvent.CLAIM_PATTERN, 'Failed to verify bingo claim')
    def on_claim_pattern(self, data):
        payload = ClaimPatternPayload.model_validate(data)
        self._perform(payload.session_id, InboundEvent.CLAIM_PATTERN, payload.pattern)


def register_socketio_handlers(manager: LobbyManager, namespace: str = '/') -> EventRouter:
    """Bind a fresh router for ``manager`` to the shared SocketIO instance."""
    router = EventRouter(manager)
    handlers = {
        InboundEvent.CREATE_SESSION: router.on_create_session,
        InboundEvent.HOST_ATTACH: router.on_host_attach,
        InboundEvent.JOIN_SESSION: router.on_join_session,
        InboundEvent.START_GAME: router.on_start_game,
        InboundEvent.SUBMIT_ANSWER: router.on_submit_answer,
        InboundEvent.ADVANCE_QUESTION: router.on_advance_question,
        InboundEvent.MARK_NUMBER: router.on_mark_number,
        InboundEvent.CALL_NUMBER: router.on_call_number,
        InboundEvent.CLAIM_PATTERN: router.on_claim_pattern,
    }
    for event, handler in handlers.items():
        socketio.on_event(event.value, handler, namespace=namespace)
    socketio.on_event('disconnect', router.on_disconnect, namespace=namespace)
    return router

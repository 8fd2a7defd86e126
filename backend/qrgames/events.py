"""Socket.IO event names and the typed shapes of inbound payloads."""

from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from qrgames.models import GameType


class InboundEvent(StrEnum):
    CREATE_SESSION = 'create-session'
    HOST_ATTACH = 'host-attach'
    JOIN_SESSION = 'join-session'
    START_GAME = 'start-game'
    SUBMIT_ANSWER = 'submit-answer'
    ADVANCE_QUESTION = 'advance-question'
    MARK_NUMBER = 'mark-number'
    CALL_NUMBER = 'call-number'
    CLAIM_PATTERN = 'claim-pattern'


class OutboundEvent(StrEnum):
    SESSION_CREATED = 'session-created'
    PLAYER_JOINED = 'player-joined'
    PLAYER_LEFT = 'player-left'
    GAME_STARTED = 'game-started'
    ANSWER_RESULT = 'answer-result'
    NEXT_QUESTION = 'next-question'
    GAME_ENDED = 'game-ended'
    NUMBER_MARKED = 'number-marked'
    NUMBER_CALLED = 'number-called'
    BINGO_WINNER = 'bingo-winner'
    INVALID_BINGO = 'invalid-bingo'
    SESSION_ENDED = 'session-ended'
    ERROR = 'error'


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore', frozen=True)


class CreateSessionPayload(_Payload):
    game_type: Optional[GameType] = Field(default=None, alias='gameType')

    @model_validator(mode='before')
    @classmethod
    def _allow_empty(cls, data: Any) -> Any:
        return {} if data is None else data


class SessionPayload(_Payload):
    """Any payload addressed to one session. A bare string is the session id."""

    session_id: str = Field(alias='sessionId', max_length=64)

    @model_validator(mode='before')
    @classmethod
    def _wrap_bare_id(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {'sessionId': data}
        return data


class JoinSessionPayload(SessionPayload):
    # Player contents are checked by qrgames.validation, which reports
    # field-specific errors.
    player: Optional[Dict[str, Any]] = None


class StartGamePayload(SessionPayload):
    game_type: Optional[GameType] = Field(default=None, alias='gameType')


class SubmitAnswerPayload(SessionPayload):
    answer: str = Field(max_length=200)


class MarkNumberPayload(SessionPayload):
    number: int = Field(ge=1, le=75, strict=True)


class ClaimPatternPayload(SessionPayload):
    pattern: str = Field(max_length=32)


def describe_validation_error(event: str, exc) -> str:
    fields = sorted({'.'.join(str(p) for p in err['loc']) or 'payload' for err in exc.errors()})
    return f"Invalid {event} payload: {', '.join(fields)}"

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import List, Optional, Union

FREE = 'FREE'
CARD_SIZE = 5


class GameType(StrEnum):
    TRIVIA = 'trivia'
    BINGO = 'bingo'


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Question:
    text: str
    options: List[str]
    correct_answer: str

    def to_dict(self):
        return {
            'text': self.text,
            'options': list(self.options),
            'correctAnswer': self.correct_answer,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            text=data['text'],
            options=list(data['options']),
            correct_answer=data['correctAnswer'],
        )


@dataclass
class TriviaState:
    questions: List[Question]
    current_question_index: int = 0

    @property
    def is_over(self) -> bool:
        return self.current_question_index >= len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if self.is_over:
            return None
        return self.questions[self.current_question_index]

    def to_dict(self):
        return {
            'questions': [q.to_dict() for q in self.questions],
            'currentQuestionIndex': self.current_question_index,
        }

    @classmethod
    def from_dict(cls, data):
        index = int(data['currentQuestionIndex'])
        if index < 0:
            raise ValueError(f'negative question index: {index}')
        return cls(
            questions=[Question.from_dict(q) for q in data['questions']],
            current_question_index=index,
        )


@dataclass
class BingoCell:
    value: Union[int, str]
    marked: bool = False

    def to_dict(self):
        return {'value': self.value, 'marked': self.marked}

    @classmethod
    def from_dict(cls, data):
        return cls(value=data['value'], marked=bool(data['marked']))


@dataclass
class BingoState:
    called_numbers: List[int] = field(default_factory=list)
    # Patterns a player may claim in this game
    patterns: List[str] = field(default_factory=list)

    def to_dict(self):
        return {'calledNumbers': list(self.called_numbers), 'patterns': list(self.patterns)}

    @classmethod
    def from_dict(cls, data):
        return cls(
            called_numbers=[int(n) for n in data['calledNumbers']],
            patterns=[str(p) for p in data.get('patterns', [])],
        )


GameState = Union[TriviaState, BingoState]

_STATE_TYPES = {
    GameType.TRIVIA: TriviaState,
    GameType.BINGO: BingoState,
}


@dataclass
class Player:
    id: str
    name: str
    avatar: Optional[str] = None
    joined_at: datetime = field(default_factory=utcnow)
    score: Optional[int] = None
    bingo_card: Optional[List[List[BingoCell]]] = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'joinedAt': self.joined_at.isoformat(),
            'score': self.score,
            'bingoCard': [[cell.to_dict() for cell in row] for row in self.bingo_card]
            if self.bingo_card is not None else None,
        }

    @classmethod
    def from_dict(cls, data):
        card = data.get('bingoCard')
        return cls(
            id=data['id'],
            name=data['name'],
            avatar=data.get('avatar'),
            joined_at=datetime.fromisoformat(data['joinedAt']),
            score=data.get('score'),
            bingo_card=[[BingoCell.from_dict(c) for c in row] for row in card] if card is not None else None,
        )


@dataclass
class Session:
    """One lobby: a roster of players, an optional host and at most one active game."""

    id: str
    players: List[Player] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    host_connection_id: Optional[str] = None
    game_type: Optional[GameType] = None
    game_state: Optional[GameState] = None

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def remove_player(self, player_id: str) -> Optional[Player]:
        for idx, player in enumerate(self.players):
            if player.id == player_id:
                return self.players.pop(idx)
        return None

    def players_dict(self):
        return [p.to_dict() for p in self.players]

    def to_dict(self):
        return {
            'id': self.id,
            'players': self.players_dict(),
            'createdAt': self.created_at.isoformat(),
            'hostConnectionId': self.host_connection_id,
            'gameType': self.game_type.value if self.game_type else None,
            'gameState': self.game_state.to_dict() if self.game_state is not None else None,
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError(f'session record must be an object, got {type(data).__name__}')
        game_type = GameType(data['gameType']) if data.get('gameType') else None
        raw_state = data.get('gameState')
        game_state = None
        if raw_state is not None:
            if game_type is None:
                raise ValueError('gameState present without gameType')
            game_state = _STATE_TYPES[game_type].from_dict(raw_state)
        return cls(
            id=data['id'],
            players=[Player.from_dict(p) for p in data.get('players', [])],
            created_at=datetime.fromisoformat(data['createdAt']),
            host_connection_id=data.get('hostConnectionId'),
            game_type=game_type,
            game_state=game_state,
        )

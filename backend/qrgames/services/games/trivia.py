from typing import Iterable, List, NamedTuple, Optional

from qrgames.events import InboundEvent, OutboundEvent
from qrgames.models import GameType, Player, Question, Session, TriviaState
from .base import Action, ActionResult, GameEngine
from .questions import DEFAULT_QUESTIONS


class AnswerResult(NamedTuple):
    is_correct: bool
    correct_answer: str


class AdvanceResult(NamedTuple):
    has_next: bool
    is_game_over: bool


class TriviaEngine(GameEngine):
    """Question-by-question quiz; one point per correct answer."""

    game_type = GameType.TRIVIA
    authority_actions = frozenset({InboundEvent.ADVANCE_QUESTION.value})

    def __init__(self, questions: Optional[Iterable[Question]] = None):
        self.questions: List[Question] = list(questions) if questions is not None else list(DEFAULT_QUESTIONS)

    def initialize(self, session: Session) -> None:
        session.game_state = TriviaState(
            questions=[Question(q.text, list(q.options), q.correct_answer) for q in self.questions],
            current_question_index=0,
        )
        for player in session.players:
            player.score = 0
            player.bingo_card = None

    def on_player_joined(self, session: Session, player: Player) -> None:
        if self.is_active(session):
            player.score = 0

    def submit_answer(self, session: Session, player_id: str, answer: str) -> Optional[AnswerResult]:
        if not self.is_active(session):
            return None
        question = session.game_state.current_question
        player = session.find_player(player_id)
        if question is None or player is None:
            return None
        is_correct = answer == question.correct_answer
        if is_correct:
            player.score = (player.score or 0) + 1
        return AnswerResult(is_correct, question.correct_answer)

    def advance(self, session: Session) -> AdvanceResult:
        if not self.is_active(session):
            return AdvanceResult(has_next=False, is_game_over=True)
        state = session.game_state
        state.current_question_index += 1
        return AdvanceResult(has_next=not state.is_over, is_game_over=state.is_over)

    @staticmethod
    def final_scores(session: Session) -> List[dict]:
        # sorted() is stable, so ties keep join order
        ranked = sorted(session.players, key=lambda p: p.score or 0, reverse=True)
        return [{'name': p.name, 'score': p.score or 0} for p in ranked]

    def handle_player_action(self, session: Session, player_id: str, action: Action) -> Optional[ActionResult]:
        if action.kind == InboundEvent.SUBMIT_ANSWER:
            player = session.find_player(player_id)
            result = self.submit_answer(session, player_id, action.value)
            if result is None:
                return None
            return ActionResult(OutboundEvent.ANSWER_RESULT, {
                'playerId': player_id,
                'playerName': player.name,
                'isCorrect': result.is_correct,
                'correctAnswer': result.correct_answer,
            })

        if action.kind == InboundEvent.ADVANCE_QUESTION:
            if not self.is_active(session):
                return None
            result = self.advance(session)
            if result.is_game_over:
                return ActionResult(OutboundEvent.GAME_ENDED, {'players': self.final_scores(session)})
            state = session.game_state
            return ActionResult(OutboundEvent.NEXT_QUESTION, {
                'questionIndex': state.current_question_index,
                'question': state.current_question.to_dict(),
            })

        return None

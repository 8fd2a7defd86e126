import random
from typing import List, NamedTuple, Optional

from qrgames.events import InboundEvent, OutboundEvent
from qrgames.models import CARD_SIZE, FREE, BingoCell, BingoState, GameType, Player, Session
from .base import Action, ActionResult, GameEngine, Scope

MAX_NUMBER = 75
COLUMN_SPAN = 15
CENTER = CARD_SIZE // 2

SINGLE_LINE = 'single-line'
FOUR_CORNERS = '4-corners'
FULL_CARD = 'full-card'
PATTERNS = (SINGLE_LINE, FOUR_CORNERS, FULL_CARD)

Card = List[List[BingoCell]]


class CallResult(NamedTuple):
    number: Optional[int]
    called_numbers: List[int]


def check_pattern(card: Card, pattern: str) -> bool:
    """Whether ``card`` (row-major) shows ``pattern``. Unknown patterns never match."""
    if pattern == SINGLE_LINE:
        if any(all(cell.marked for cell in row) for row in card):
            return True
        if any(all(row[col].marked for row in card) for col in range(CARD_SIZE)):
            return True
        if all(card[i][i].marked for i in range(CARD_SIZE)):
            return True
        return all(card[i][CARD_SIZE - 1 - i].marked for i in range(CARD_SIZE))
    if pattern == FOUR_CORNERS:
        last = CARD_SIZE - 1
        return card[0][0].marked and card[0][last].marked and card[last][0].marked and card[last][last].marked
    if pattern == FULL_CARD:
        return all(cell.marked for row in card for cell in row)
    return False


class BingoEngine(GameEngine):
    """75-ball bingo. The host calls numbers, players mark their own cards."""

    game_type = GameType.BINGO
    authority_actions = frozenset({InboundEvent.CALL_NUMBER.value})

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate_card(self) -> Card:
        columns = []
        for col in range(CARD_SIZE):
            low = col * COLUMN_SPAN + 1
            high = low + COLUMN_SPAN - 1
            used = set()
            column = []
            for row in range(CARD_SIZE):
                if col == CENTER and row == CENTER:
                    column.append(BingoCell(FREE, marked=True))
                    continue
                num = self.rng.randint(low, high)
                while num in used:
                    num = self.rng.randint(low, high)
                used.add(num)
                column.append(BingoCell(num))
            columns.append(column)
        # Built column by column; stored and checked row-major
        return [[columns[col][row] for col in range(CARD_SIZE)] for row in range(CARD_SIZE)]

    def initialize(self, session: Session) -> None:
        session.game_state = BingoState(called_numbers=[], patterns=list(PATTERNS))
        for player in session.players:
            player.bingo_card = self.generate_card()
            player.score = None

    def on_player_joined(self, session: Session, player: Player) -> None:
        if self.is_active(session):
            player.bingo_card = self.generate_card()

    @staticmethod
    def mark_number(session: Session, player_id: str, number: int) -> bool:
        player = session.find_player(player_id)
        if player is None or player.bingo_card is None:
            return False
        for row in player.bingo_card:
            for cell in row:
                if cell.value == number:
                    cell.marked = True
        return True

    def call_number(self, session: Session) -> CallResult:
        if not self.is_active(session):
            return CallResult(None, [])
        called = session.game_state.called_numbers
        already = set(called)
        available = [n for n in range(1, MAX_NUMBER + 1) if n not in already]
        if not available:
            return CallResult(None, list(called))
        number = self.rng.choice(available)
        called.append(number)
        return CallResult(number, list(called))

    check_pattern = staticmethod(check_pattern)

    def handle_player_action(self, session: Session, player_id: str, action: Action) -> Optional[ActionResult]:
        if not self.is_active(session):
            return None

        if action.kind == InboundEvent.MARK_NUMBER:
            if not self.mark_number(session, player_id, action.value):
                return None
            return ActionResult(OutboundEvent.NUMBER_MARKED, {'number': action.value}, Scope.SENDER)

        if action.kind == InboundEvent.CALL_NUMBER:
            result = self.call_number(session)
            if result.number is None:
                return None
            return ActionResult(OutboundEvent.NUMBER_CALLED, {
                'number': result.number,
                'calledNumbers': result.called_numbers,
            })

        if action.kind == InboundEvent.CLAIM_PATTERN:
            player = session.find_player(player_id)
            if player is None or player.bingo_card is None:
                return None
            if check_pattern(player.bingo_card, action.value):
                return ActionResult(OutboundEvent.BINGO_WINNER, {
                    'playerId': player_id,
                    'playerName': player.name,
                    'pattern': action.value,
                })
            return ActionResult(OutboundEvent.INVALID_BINGO, {'pattern': action.value}, Scope.SENDER)

        return None

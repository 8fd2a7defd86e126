"""Game engines: trivia and bingo.

This package contains pure game logic that is driven by the lobby manager,
keeping transport and storage concerns out of the game mechanics.
"""

from typing import Dict, Iterable, Optional

from qrgames.models import Question
from .base import Action, ActionResult, GameEngine, Scope
from .bingo import BingoEngine
from .trivia import TriviaEngine


def default_engines(questions: Optional[Iterable[Question]] = None) -> Dict[str, GameEngine]:
    engines = (TriviaEngine(questions), BingoEngine())
    return {engine.game_type.value: engine for engine in engines}


__all__ = [
    'Action',
    'ActionResult',
    'BingoEngine',
    'GameEngine',
    'Scope',
    'TriviaEngine',
    'default_engines',
]

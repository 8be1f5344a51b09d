"""
Engine Core - Pure tic-tac-toe rules.

Nothing in this package holds shared state. Every function takes a board or
a GameState and returns a value; mutation of live games happens in the
session layer.
"""

from .state import Mark, GameStatus, GameState, BOARD_SIZE, EMPTY
from .rules import (
    WINNING_LINES,
    evaluate_win,
    evaluate_draw,
    is_legal_move,
    illegal_move_reason,
    other_mark,
)
from .action import Move, MoveResult
from .reducer import apply_move

__all__ = [
    # State
    "Mark",
    "GameStatus",
    "GameState",
    "BOARD_SIZE",
    "EMPTY",
    # Rules
    "WINNING_LINES",
    "evaluate_win",
    "evaluate_draw",
    "is_legal_move",
    "illegal_move_reason",
    "other_mark",
    # Actions
    "Move",
    "MoveResult",
    "apply_move",
]

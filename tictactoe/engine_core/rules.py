"""
Rules - Win, draw and move-legality checks for 3x3 tic-tac-toe.

All functions are pure: same input, same answer, no mutation.
"""

from __future__ import annotations
from typing import Sequence

from .state import Mark, GameState, BOARD_SIZE, EMPTY


# 3 rows, 3 columns, 2 diagonals
WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


def other_mark(mark: Mark | str) -> Mark:
    """Return the mark that plays after `mark`."""
    return Mark.O if Mark(mark) is Mark.X else Mark.X


def evaluate_win(board: Sequence[str]) -> Mark | None:
    """
    Return the mark holding a complete line, or None.

    Lines are checked in WINNING_LINES order and the first uniform one wins.
    Two winning marks cannot happen in legal play.
    """
    for a, b, c in WINNING_LINES:
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return Mark(board[a])
    return None


def evaluate_draw(board: Sequence[str]) -> bool:
    """
    True if every cell is filled.

    Only meaningful after evaluate_win has returned None.
    """
    return all(cell != EMPTY for cell in board)


def illegal_move_reason(state: GameState, position: int, mark: Mark | str) -> str | None:
    """
    Explain why a move is illegal.

    Returns an error message if invalid, None if valid.
    """
    if state.is_over:
        return "Game is over"

    if isinstance(position, bool) or not isinstance(position, int):
        return f"Position must be an integer, got {position!r}"

    if not 0 <= position < BOARD_SIZE:
        return f"Position {position} is off the board"

    if state.board[position] != EMPTY:
        return f"Cell {position} is already taken"

    if mark != state.next_mark:
        symbol = mark.value if isinstance(mark, Mark) else mark
        return f"Not {symbol}'s turn"

    return None


def is_legal_move(state: GameState, position: int, mark: Mark | str) -> bool:
    """True iff the game is running, the cell is free and it is `mark`'s turn."""
    return illegal_move_reason(state, position, mark) is None

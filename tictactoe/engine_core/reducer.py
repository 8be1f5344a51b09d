"""
Reducer - Applies moves to game state.

The reducer is the single point of game-state change.
Sessions call apply_move() while holding their own lock.

Design principles:
- Pure function: (state, move) -> MoveResult
- Validates before applying
- Never edits the input state
"""

from __future__ import annotations

from .state import Mark, GameState, GameStatus
from .action import Move, MoveResult
from .rules import evaluate_win, evaluate_draw, illegal_move_reason, other_mark


def apply_move(state: GameState, move: Move) -> MoveResult:
    """
    Apply a move to the game state.

    On success the cell is set, the turn passes to the other mark, and the
    board is checked for a win and then for a draw. The turn is advanced
    on the final move too; it is frozen from then on.
    """
    error = illegal_move_reason(state, move.position, move.mark)
    if error:
        return MoveResult.failure(error)

    mark = Mark(move.mark)
    board = list(state.board)
    board[move.position] = mark.value

    winner = evaluate_win(board)
    if winner is not None:
        status = GameStatus.WON
    elif evaluate_draw(board):
        status = GameStatus.DRAWN
    else:
        status = GameStatus.IN_PROGRESS

    new_state = state._copy_with(
        board=board,
        next_mark=other_mark(mark),
        status=status,
        winner=winner,
        move_count=state.move_count + 1,
    )
    return MoveResult.success_with_state(new_state)

"""
Game State - The board, the turn and the outcome of one game.

Design principles:
- Immutable-friendly: reducers return a new state instead of editing one
- Serializable: cells are plain strings, matching the wire format
- A cell once set is never cleared
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


BOARD_SIZE = 9
EMPTY = ""


class Mark(str, Enum):
    """The two symbols a participant can play."""
    X = "X"
    O = "O"


class GameStatus(Enum):
    """High-level game status. WON and DRAWN are terminal."""
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


def _empty_board() -> list[str]:
    return [EMPTY] * BOARD_SIZE


@dataclass
class GameState:
    """
    Authoritative state of a single game.

    `next_mark` alternates on every accepted move and is left untouched
    once the game is over. `winner` is only set when status is WON.
    """
    board: list[str] = field(default_factory=_empty_board)
    next_mark: Mark = Mark.X
    status: GameStatus = GameStatus.IN_PROGRESS
    winner: Mark | None = None
    move_count: int = 0

    def __post_init__(self):
        if len(self.board) != BOARD_SIZE:
            raise ValueError(
                f"Board must have exactly {BOARD_SIZE} cells, got {len(self.board)}"
            )

    @property
    def is_over(self) -> bool:
        return self.status is not GameStatus.IN_PROGRESS

    def copy(self) -> GameState:
        """Return an independent copy (the board list is not shared)."""
        return GameState(
            board=list(self.board),
            next_mark=self.next_mark,
            status=self.status,
            winner=self.winner,
            move_count=self.move_count,
        )

    def _copy_with(self, **changes) -> GameState:
        """Return a copy with some fields replaced."""
        new_state = self.copy()
        for key, value in changes.items():
            setattr(new_state, key, value)
        return new_state

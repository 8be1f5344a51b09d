"""
Move System - Moves and move results.

A Move is the only way a game's state changes. The reducer turns
(state, move) into a MoveResult.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import Mark, GameState


@dataclass(frozen=True)
class Move:
    """A mark placed on one cell."""
    position: int
    mark: Mark | str

    @classmethod
    def x(cls, position: int) -> Move:
        """Factory for an X move."""
        return cls(position=position, mark=Mark.X)

    @classmethod
    def o(cls, position: int) -> Move:
        """Factory for an O move."""
        return cls(position=position, mark=Mark.O)


@dataclass
class MoveResult:
    """
    Result of applying a move.

    Contains:
    - Whether the move was accepted
    - New state (if accepted)
    - Error (if rejected)
    - Whether this move ended the game
    """
    success: bool
    new_state: GameState | None = None
    error: str | None = None
    game_over: bool = False

    @classmethod
    def failure(cls, error: str) -> MoveResult:
        """Create a failure result."""
        return cls(success=False, error=error)

    @classmethod
    def success_with_state(cls, state: GameState) -> MoveResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, game_over=state.is_over)

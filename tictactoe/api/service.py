"""
Game Service - Business logic layer between the HTTP routes and the sessions.

The service:
1. Creates games
2. Checks games exist before players connect
3. Reports game state

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..session import SessionRegistry, Session
from .schemas import (
    CreateGameResponse,
    JoinGameResponse,
    GameSnapshotResponse,
    build_snapshot_response,
)


MAX_PLAYERS = 2


class GameFull(Exception):
    """Raised when joining a game that already has its players attached."""

    def __init__(self, game_id: str):
        super().__init__("Game is full")
        self.game_id = game_id


@dataclass
class GameService:
    """
    Game service over one explicitly owned SessionRegistry.

    Usage:
        service = GameService()

        game_id = service.create_game().game_id
        service.join_game(game_id)
        session = service.get_session(game_id)
    """
    registry: SessionRegistry = field(default_factory=SessionRegistry)
    max_players: int = MAX_PLAYERS

    def create_game(self) -> CreateGameResponse:
        """Create a new game. Always succeeds."""
        return CreateGameResponse(game_id=self.registry.create_session())

    def join_game(self, game_id: str) -> JoinGameResponse:
        """
        Check a game can be joined.

        Raises SessionNotFound for an unknown id and GameFull when
        max_players connections are already attached. Joining does not
        attach; the websocket does.
        """
        session = self.registry.get_session(game_id)
        participants = session.participant_count
        if participants >= self.max_players:
            raise GameFull(game_id)
        return JoinGameResponse(game_id=game_id, participants=participants)

    def get_session(self, game_id: str) -> Session:
        """Get the live session; raises SessionNotFound."""
        return self.registry.get_session(game_id)

    def get_game(self, game_id: str) -> GameSnapshotResponse:
        """Get the current state of a game; raises SessionNotFound."""
        session = self.registry.get_session(game_id)
        return build_snapshot_response(session.snapshot(), session.participant_count)

    def list_games(self) -> list[str]:
        """List all game ids."""
        return self.registry.list_sessions()
